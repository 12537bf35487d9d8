#!/usr/bin/env python3
"""
Scene preset JSON loading utilities.

Presets live in presets/*.json next to this module. Each file configures one demo:

Preset JSON (presets/*.json):
{
  "name": "Human-friendly preset name",
  "demo": "pendulum",                 # projectile | pendulum | collision | springs | rotating_spring
  "description": "Optional description",
  "parameters": {                     # any subset of the demo's parameter fields
    "gravity": 9.8,
    "angles_deg": [120, 60, 30],
    "real_physics": true
  },
  "enabled": [true, true, true]       # optional: pendulum segments / springs to switch on
}

Unknown parameter names are ignored and out-of-range values are clamped, so a
hand-edited file never breaks the application. Unreadable files are skipped.
Users can add their own JSON files into the folder and they'll be picked up.
"""
import json
import logging
import os
from typing import List, NamedTuple, Optional, Tuple

from .data_models import SimulationParameters, parameters_from_dict

logger = logging.getLogger(__name__)

PRESETS_DIR = os.path.join(os.path.dirname(__file__), "presets")


class Preset(NamedTuple):
  name: str
  demo: str
  description: str
  parameters: SimulationParameters
  enabled: Optional[Tuple[bool, ...]]


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      data = json.load(f)
  except (OSError, ValueError) as e:
    logger.warning("Could not read preset %s: %s", path, e)
    return None
  if not isinstance(data, dict):
    logger.warning("Preset %s is not a JSON object", path)
    return None
  return data


def _coerce_flags(flags) -> Optional[Tuple[bool, ...]]:
  if not isinstance(flags, list):
    return None
  return tuple(bool(f) for f in flags)


def list_presets(directory: str = PRESETS_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available presets."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(directory):
    return items
  for fn in sorted(os.listdir(directory)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(directory, fn)) or {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_preset(file_name: str, directory: str = PRESETS_DIR) -> Optional[Preset]:
  """
  Load a preset JSON by file name.
  Returns None if the file is unreadable or names an unknown demo.
  """
  data = _read_json(os.path.join(directory, file_name))
  if data is None:
    return None
  demo = data.get("demo")
  values = data.get("parameters") or {}
  if not isinstance(values, dict):
    logger.warning("Skipping preset %s: parameters must be an object", file_name)
    return None
  try:
    params = parameters_from_dict(demo, values)
  except (TypeError, ValueError) as e:
    logger.warning("Skipping preset %s: %s", file_name, e)
    return None
  return Preset(
    name=data.get("name") or os.path.splitext(file_name)[0],
    demo=demo,
    description=data.get("description", ""),
    parameters=params,
    enabled=_coerce_flags(data.get("enabled")),
  )
