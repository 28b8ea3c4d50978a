"""Effect registry, preset registry, fx token parser, and type coercion for CLI."""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any

from pcmfx import effects, ops
from pcmfx.settings import (
    EqSettings,
    FadeSettings,
    SidechainSettings,
    TrimSettings,
)


# ---------------------------------------------------------------------------
# Effect registry
# ---------------------------------------------------------------------------

# name -> (callable, settings class or None, category)
# Settings-driven effects take ``(buf, settings)``; the single-band filters
# take their parameters as keyword arguments.
_REGISTRY: dict[str, tuple[Any, type | None, str]] = {
    "equalize": (effects.equalize, EqSettings, "eq"),
    "low_shelf_db": (effects.low_shelf_db, None, "eq"),
    "peak_db": (effects.peak_db, None, "eq"),
    "high_shelf_db": (effects.high_shelf_db, None, "eq"),
    "sidechain_compress": (effects.sidechain_compress, SidechainSettings, "dynamics"),
    "fade": (ops.fade, FadeSettings, "edit"),
    "reverse": (ops.reverse, None, "edit"),
    "trim": (ops.trim, TrimSettings, "edit"),
}

# Short names accepted on the command line
_ALIASES: dict[str, str] = {
    "eq": "equalize",
    "sidechain": "sidechain_compress",
    "duck": "sidechain_compress",
}


def _group_by_category(pairs) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for name, category in pairs:
        groups.setdefault(category, []).append(name)
    return groups


def get_registry() -> dict[str, tuple[Any, type | None, str]]:
    return _REGISTRY


def get_categories() -> dict[str, list[str]]:
    """Effect names grouped by category."""
    return _group_by_category((name, entry[2]) for name, entry in _REGISTRY.items())


def get_effect(name: str) -> tuple[Any, type | None]:
    """``(function, settings class or None)`` for a name or alias.

    Raises KeyError for unknown names.
    """
    try:
        fn, settings_cls, _ = _REGISTRY[_ALIASES.get(name, name)]
    except KeyError:
        raise KeyError(f"Unknown effect: {name!r}") from None
    return fn, settings_cls


def format_signature(name: str) -> str:
    """Parameter listing shown by ``pcmfx list``, e.g. ``(bass=0.0, mid=0.0, treble=0.0)``."""
    fn, settings_cls = get_effect(name)
    if settings_cls is not None:
        shown = [f"{f.name}={f.default!r}" for f in dataclasses.fields(settings_cls)]
    else:
        shown = [
            pname if p.default is inspect.Parameter.empty else f"{pname}={p.default!r}"
            for pname, p in inspect.signature(fn).parameters.items()
            if pname != "buf"
        ]
    return "(" + ", ".join(shown) + ")"


def run_effect(name: str, buf: Any, params: dict[str, Any]) -> Any:
    """Apply a registered effect with already-coerced *params*."""
    fn, settings_cls = get_effect(name)
    if settings_cls is None:
        return fn(buf, **params)
    return fn(buf, settings_cls(**params))


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, dict[str, Any]] = {
    # --- Ducking ---
    "duck_gentle": {
        "category": "dynamics",
        "description": "Subtle self-ducking that rides the loudest hits",
        "chain": [
            ("sidechain_compress", {"threshold_db": -18.0, "ratio": 2.0, "depth": 0.4}),
        ],
    },
    "duck_pump": {
        "category": "dynamics",
        "description": "Lo-fi pumping: fast attack, slow release, deep ducking",
        "chain": [
            (
                "sidechain_compress",
                {
                    "threshold_db": -24.0,
                    "ratio": 8.0,
                    "attack_seconds": 0.001,
                    "release_seconds": 0.35,
                    "depth": 0.9,
                },
            ),
        ],
    },
    # --- Tone ---
    "warm": {
        "category": "tone",
        "description": "Warm (bass up, treble softened)",
        "chain": [("equalize", {"bass": 4.0, "mid": 0.0, "treble": -3.0})],
    },
    "bright": {
        "category": "tone",
        "description": "Bright (treble lift, slight low cut)",
        "chain": [("equalize", {"bass": -2.0, "mid": 0.0, "treble": 5.0})],
    },
    "telephone": {
        "category": "tone",
        "description": "Telephone (lows and highs cut, mids pushed)",
        "chain": [("equalize", {"bass": -12.0, "mid": 6.0, "treble": -12.0})],
    },
    # --- Editing ---
    "soft_edges": {
        "category": "edit",
        "description": "Half-second fade in and out",
        "chain": [("fade", {"fade_in_seconds": 0.5, "fade_out_seconds": 0.5})],
    },
    "reverse_swell": {
        "category": "edit",
        "description": "Reverse, then a long fade-in for a swelling tail",
        "chain": [
            ("reverse", {}),
            ("fade", {"fade_in_seconds": 2.0, "fade_out_seconds": 0.05}),
        ],
    },
}


def _accepted_params(name: str) -> set[str]:
    fn, settings_cls = get_effect(name)
    if settings_cls is not None:
        return {f.name for f in dataclasses.fields(settings_cls)}
    return {p for p in inspect.signature(fn).parameters if p != "buf"}


def apply_preset(name: str, buf: Any, overrides: dict[str, Any] | None = None) -> Any:
    """Run every step of preset *name* over *buf*.

    Each override replaces the stored value in all steps that take a
    parameter of that name.  An override no step accepts raises KeyError.
    """
    try:
        chain = PRESETS[name]["chain"]
    except KeyError:
        raise KeyError(f"Unknown preset: {name!r}") from None
    overrides = dict(overrides or {})
    unused = set(overrides)
    for effect_name, stored in chain:
        accepted = _accepted_params(effect_name)
        unused -= accepted
        params = dict(stored)
        params.update((k, v) for k, v in overrides.items() if k in accepted)
        buf = run_effect(effect_name, buf, params)
    if unused:
        raise KeyError(f"Preset {name!r} has no parameter(s): {sorted(unused)}")
    return buf


def get_preset_categories() -> dict[str, list[str]]:
    """Preset names grouped by category."""
    return _group_by_category((name, p["category"]) for name, p in PRESETS.items())


# ---------------------------------------------------------------------------
# Command-line values
# ---------------------------------------------------------------------------

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})


def parse_fx_token(token: str) -> tuple[str, dict[str, str]]:
    """Split ``'name:key=value,key=value'`` into the name and raw values.

    Values stay strings; ``coerce_params`` converts them.
    """
    name, _, body = token.partition(":")
    params: dict[str, str] = {}
    if body:
        for item in body.split(","):
            key, sep, value = item.partition("=")
            if not sep:
                raise ValueError(f"Invalid parameter in fx token: {item!r}")
            params[key.strip()] = value.strip()
    return name.strip(), params


def coerce_value(value: str, target_type: type | None) -> Any:
    """Convert a command-line string to *target_type*.

    Without a target type whole numbers become int, other numbers float,
    and anything else stays a string.
    """
    if target_type is bool:
        return value.strip().lower() in _TRUE_WORDS
    if target_type in (int, float, str):
        return target_type(value)
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def _param_types(name: str) -> dict[str, type | None]:
    fn, settings_cls = get_effect(name)
    if settings_cls is not None:
        return {f.name: type(f.default) for f in dataclasses.fields(settings_cls)}
    types: dict[str, type | None] = {}
    for pname, param in inspect.signature(fn).parameters.items():
        if pname != "buf":
            has_default = param.default not in (inspect.Parameter.empty, None)
            types[pname] = type(param.default) if has_default else None
    return types


def coerce_params(name: str, raw_params: dict[str, str]) -> dict[str, Any]:
    """Convert raw string params for effect *name* to their declared types.

    Unknown keys raise KeyError so a typo is never silently ignored.
    """
    types = _param_types(name)
    unknown = sorted(set(raw_params) - set(types))
    if unknown:
        raise KeyError(f"{name} has no parameter {unknown[0]!r}")
    return {k: coerce_value(v, types[k]) for k, v in raw_params.items()}
