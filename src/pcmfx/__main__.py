"""pcmfx command line: run effects over WAV files, join them, inspect them.

    pcmfx info take.wav
    pcmfx process take.wav -o out.wav -f eq:bass=4 -f duck:depth=0.8
    pcmfx merge a.wav b.wav -o ab.wav --crossfade 1.5
    pcmfx waveform take.wav --bins 80 --normalize
"""

from __future__ import annotations

import argparse
import json
import sys
from collections import deque
from pathlib import Path

from pcmfx import __version__
from pcmfx.buffer import AudioBuffer

DEFAULT_BIT_DEPTH = 16

# Output levels selected by -q / -v
QUIET = 0
NORMAL = 1
VERBOSE = 2


def _level(args: argparse.Namespace) -> int:
    if getattr(args, "quiet", False):
        return QUIET
    return VERBOSE if getattr(args, "verbose", False) else NORMAL


def _log(args: argparse.Namespace | None, msg: str, level: int = NORMAL) -> None:
    """Print *msg* to stdout when the chosen output level reaches *level*."""
    if args is not None and _level(args) >= level:
        print(msg)


def _log_verbose(args: argparse.Namespace | None, msg: str) -> None:
    _log(args, msg, VERBOSE)


def _fail(msg: str) -> None:
    """Report *msg* on stderr and exit with status 1."""
    print(msg, file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# File access
# ---------------------------------------------------------------------------


def _load(path: str, args: argparse.Namespace | None = None) -> AudioBuffer:
    from pcmfx.io import read

    _log_verbose(args, f"  <- {path}")
    try:
        buf = read(path)
    except Exception as e:
        _fail(f"Error reading {path}: {e}")
    _log_verbose(
        args,
        f"     {buf.channels} ch, {buf.frames} frames @ {buf.sample_rate:g} Hz "
        f"({buf.duration:.3f}s)",
    )
    return buf


def _save(
    path: str,
    buf: AudioBuffer,
    args: argparse.Namespace | None = None,
) -> None:
    from pcmfx.io import write

    bit_depth = getattr(args, "bit_depth", None) or DEFAULT_BIT_DEPTH
    _log_verbose(args, f"  -> {path} [{bit_depth}-bit PCM]")
    try:
        write(path, buf, bit_depth=bit_depth)
    except Exception as e:
        _fail(f"Error writing {path}: {e}")


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------


def cmd_info(args: argparse.Namespace) -> None:
    """Show format and peak level of one file."""
    from pcmfx.analysis import peak_db

    buf = _load(args.file, args)
    peak = peak_db(buf)
    fields = {
        "path": str(args.file),
        "sample_rate": int(buf.sample_rate),
        "channels": buf.channels,
        "layout": buf.channel_layout or "-",
        "frames": buf.frames,
        "duration": f"{buf.duration:.3f}s",
        "peak_db": "-inf" if peak == float("-inf") else f"{peak:.1f}",
    }
    if args.json:
        print(json.dumps(fields, indent=2))
        return
    width = max(len(k) for k in fields)
    for key, value in fields.items():
        print(f"  {key:<{width}}: {value}")


# ---------------------------------------------------------------------------
# process
# ---------------------------------------------------------------------------


def _parse_steps(args: argparse.Namespace) -> list[tuple[str, str, dict]]:
    """Turn -f and -p options into ``(kind, name, params)`` steps.

    Effects (``kind == "fx"``) come first in command-line order, then
    presets (``kind == "preset"``).
    """
    from pcmfx._cli import PRESETS, coerce_params, get_effect, parse_fx_token

    steps: list[tuple[str, str, dict]] = []
    for token in args.fx or []:
        try:
            name, raw = parse_fx_token(token)
            get_effect(name)
            params = coerce_params(name, raw)
        except (KeyError, ValueError) as e:
            _fail(f"Invalid effect {token!r}: {e}")
        steps.append(("fx", name, params))
    for name in args.preset or []:
        if name not in PRESETS:
            _fail(f"Unknown preset: {name!r}")
        steps.append(("preset", name, {}))
    return steps


def _describe_steps(steps: list[tuple[str, str, dict]]) -> str:
    from pcmfx._cli import PRESETS

    if not steps:
        return "  (no effects -- input is copied unchanged)"
    lines = []
    for i, (kind, name, params) in enumerate(steps, 1):
        if kind == "preset":
            lines.append(f"  {i}. preset {name}: {PRESETS[name]['description']}")
        else:
            shown = ", ".join(f"{k}={v}" for k, v in params.items())
            lines.append(f"  {i}. {name}({shown})")
    return "\n".join(lines)


def _run_steps(buf: AudioBuffer, steps: list[tuple[str, str, dict]]) -> AudioBuffer:
    from pcmfx._cli import apply_preset, run_effect

    for kind, name, params in steps:
        if kind == "preset":
            buf = apply_preset(name, buf)
        else:
            buf = run_effect(name, buf, params)
    return buf


def _destination(src: str, args: argparse.Namespace) -> str:
    """Output path for *src*: ``--output`` or ``--output-dir/<src name>``."""
    if args.output_dir:
        out_dir = Path(args.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        return str(out_dir / Path(src).name)
    return args.output


def _destinations(args: argparse.Namespace) -> list[tuple[str, str]]:
    """``(input, output)`` pairs; two inputs may not share one output."""
    claimed: dict[str, str] = {}
    pairs = []
    for src in args.input:
        dst = _destination(src, args)
        key = str(Path(dst).resolve())
        if key in claimed:
            _fail(f"Error: {claimed[key]} and {src} would both be written to {dst}")
        claimed[key] = src
        pairs.append((src, dst))
    return pairs


def _finish(src: str, dst: str, future, args: argparse.Namespace) -> None:
    try:
        out = future.result()
    except Exception as e:
        _fail(f"Error processing {src}: {e}")
    _save(dst, out, args)
    _log(args, f"{src} -> {dst}")


def cmd_process(args: argparse.Namespace) -> None:
    """Run an effect chain over each input file.

    Files are handed to an EffectRunner in order.  At most ``--jobs``
    files are decoded or awaiting output at any moment.
    """
    from pcmfx.runner import EffectRunner

    steps = _parse_steps(args)

    if args.dry_run:
        print("Steps:")
        print(_describe_steps(steps))
        print(f"Inputs ({len(args.input)}):")
        for src in args.input:
            print(f"  {src}")
        target = args.output_dir or args.output
        if target:
            print(f"Target: {target}")
        print(f"Bit depth: {args.bit_depth or DEFAULT_BIT_DEPTH}")
        return

    pairs = _destinations(args)
    _log_verbose(args, "  Steps:\n" + _describe_steps(steps))
    with EffectRunner(max_workers=args.jobs) as runner:
        window: deque = deque()
        for src, dst in pairs:
            future = runner.submit(_run_steps, _load(src, args), steps)
            window.append((src, dst, future))
            if len(window) >= args.jobs:
                _finish(*window.popleft(), args)
        while window:
            _finish(*window.popleft(), args)


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------


def cmd_merge(args: argparse.Namespace) -> None:
    """Append the second file to the first with an equal-power crossfade."""
    from pcmfx.ops import merge
    from pcmfx.settings import MergeSettings

    settings = MergeSettings(
        crossfade_seconds=args.crossfade,
        volume1=args.volume1,
        volume2=args.volume2,
    )
    first, second = _load(args.first, args), _load(args.second, args)
    _log_verbose(args, f"  {settings}")
    try:
        out = merge(first, second, settings)
    except Exception as e:
        _fail(f"Error merging {args.first} and {args.second}: {e}")
    _save(args.output, out, args)
    _log(args, f"{args.output}: {out.frames} frames ({out.duration:.3f}s)")


# ---------------------------------------------------------------------------
# waveform
# ---------------------------------------------------------------------------

_BAR_WIDTH = 40


def cmd_waveform(args: argparse.Namespace) -> None:
    """Print the peak overview used to draw a waveform."""
    from pcmfx.analysis import waveform_summarize

    buf = _load(args.file, args)
    try:
        peaks = waveform_summarize(buf, args.bins, normalize=args.normalize)
    except Exception as e:
        _fail(f"Error summarizing {args.file}: {e}")

    values = [round(float(p), 6) for p in peaks]
    if args.json:
        print(json.dumps(values))
        return
    for i, v in enumerate(values):
        print(f"  {i:5d} {v:.4f} {'#' * int(round(min(v, 1.0) * _BAR_WIDTH))}")


# ---------------------------------------------------------------------------
# preset
# ---------------------------------------------------------------------------


def _print_preset_table(category: str | None) -> None:
    from pcmfx._cli import PRESETS, get_preset_categories

    groups = get_preset_categories()
    if category:
        if category not in groups:
            print(f"No presets in category: {category!r}")
            return
        groups = {category: groups[category]}
    for cat in sorted(groups):
        print(f"\n  {cat}:")
        for name in sorted(groups[cat]):
            print(f"    {name:20s} {PRESETS[name]['description']}")
    print()


def _print_preset(name: str) -> None:
    from pcmfx._cli import PRESETS, format_signature

    preset = PRESETS[name]
    print(f"\n  {name} [{preset['category']}]")
    print(f"  {preset['description']}")
    for i, (effect_name, params) in enumerate(preset["chain"], 1):
        print(f"    {i}. {effect_name}{format_signature(effect_name)}")
        for key, value in params.items():
            print(f"         {key} = {value}")
    print()


def _parse_overrides(pairs: list[str]) -> dict[str, float]:
    from pcmfx._cli import coerce_value

    overrides: dict[str, float] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            _fail(f"Invalid override (expected key=value): {pair!r}")
        try:
            overrides[key.strip()] = coerce_value(value.strip(), float)
        except ValueError:
            _fail(f"Invalid override value: {pair!r}")
    return overrides


def cmd_preset(args: argparse.Namespace) -> None:
    """List, describe or apply named presets."""
    from pcmfx._cli import PRESETS, apply_preset

    action = args.preset_action
    if action == "list":
        _print_preset_table(args.category)
        return

    if args.name not in PRESETS:
        _fail(f"Unknown preset: {args.name!r}")
    if action == "info":
        _print_preset(args.name)
        return

    overrides = _parse_overrides(args.overrides or [])
    buf = _load(args.input, args)
    try:
        out = apply_preset(args.name, buf, overrides)
    except Exception as e:
        _fail(f"Error applying preset {args.name!r}: {e}")
    _save(args.output, out, args)
    _log(args, f"{args.input} -> {args.output}")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def cmd_list(args: argparse.Namespace) -> None:
    """Show registered effects grouped by category."""
    from pcmfx._cli import format_signature, get_categories

    groups = get_categories()
    if args.category:
        if args.category not in groups:
            print(f"Unknown category: {args.category!r}")
            print(f"Available: {', '.join(sorted(groups))}")
            sys.exit(1)
        groups = {args.category: groups[args.category]}
    for cat in sorted(groups):
        print(f"\n  {cat}:")
        for name in sorted(groups[cat]):
            print(f"    {name}{format_signature(name)}")
    print()


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _bit_depth_option(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-b",
        "--bit-depth",
        type=int,
        choices=[16, 24],
        help=f"PCM bit depth of written files (default: {DEFAULT_BIT_DEPTH})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcmfx",
        description="Offline effects for PCM WAV files",
    )
    parser.add_argument("--version", action="version", version=f"pcmfx {__version__}")
    loudness = parser.add_mutually_exclusive_group()
    loudness.add_argument(
        "-v", "--verbose", action="store_true", help="Report every read, write and step"
    )
    loudness.add_argument(
        "-q", "--quiet", action="store_true", help="Print nothing but errors"
    )
    commands = parser.add_subparsers(dest="command")

    p = commands.add_parser("info", help="Format and peak level of a file")
    p.add_argument("file", help="WAV file")
    p.add_argument("--json", action="store_true", help="Print JSON instead of text")
    p.set_defaults(handler=cmd_info)

    p = commands.add_parser("process", help="Run effects and presets over files")
    p.add_argument("input", nargs="+", help="WAV file(s) to process")
    p.add_argument("-o", "--output", help="Output file when processing one input")
    p.add_argument(
        "-O", "--output-dir", help="Directory for outputs, named after each input"
    )
    p.add_argument(
        "-f",
        "--fx",
        action="append",
        metavar="NAME[:K=V,...]",
        help="Effect step, e.g. eq:bass=3,treble=-2 (repeatable)",
    )
    p.add_argument(
        "-p", "--preset", action="append", metavar="NAME", help="Preset step (repeatable)"
    )
    p.add_argument(
        "-j", "--jobs", type=int, default=1, help="Files to process concurrently"
    )
    p.add_argument(
        "-n", "--dry-run", action="store_true", help="Print the plan and stop"
    )
    _bit_depth_option(p)
    p.set_defaults(handler=cmd_process)

    p = commands.add_parser("merge", help="Join two files with a crossfade")
    p.add_argument("first", help="WAV file that plays first")
    p.add_argument("second", help="WAV file appended after it")
    p.add_argument("-o", "--output", required=True, help="Merged WAV file")
    p.add_argument("--crossfade", type=float, default=0.0, help="Overlap in seconds (0-5)")
    p.add_argument("--volume1", type=float, default=1.0, help="Linear gain of FIRST (0-2)")
    p.add_argument("--volume2", type=float, default=1.0, help="Linear gain of SECOND (0-2)")
    _bit_depth_option(p)
    p.set_defaults(handler=cmd_merge)

    p = commands.add_parser("waveform", help="Peak overview for drawing")
    p.add_argument("file", help="WAV file")
    p.add_argument("--bins", type=int, default=200, help="Number of peaks (default: 200)")
    p.add_argument("--normalize", action="store_true", help="Scale loudest peak to 1.0")
    p.add_argument("--json", action="store_true", help="Print a JSON list")
    p.set_defaults(handler=cmd_waveform)

    p = commands.add_parser("preset", help="List, describe or apply presets")
    p.set_defaults(handler=cmd_preset)
    actions = p.add_subparsers(dest="preset_action", required=True)
    a = actions.add_parser("list", help="Presets by category")
    a.add_argument("category", nargs="?", help="Only this category")
    a = actions.add_parser("info", help="Steps of one preset")
    a.add_argument("name", help="Preset name")
    a = actions.add_parser("apply", help="Apply one preset to a file")
    a.add_argument("name", help="Preset name")
    a.add_argument("input", help="WAV file to read")
    a.add_argument("output", help="WAV file to write")
    a.add_argument(
        "overrides", nargs="*", metavar="KEY=VALUE", help="Override preset parameters"
    )
    _bit_depth_option(a)

    p = commands.add_parser("list", help="Registered effects")
    p.add_argument("category", nargs="?", help="Only this category")
    p.set_defaults(handler=cmd_list)

    return parser


def _check_process_args(args: argparse.Namespace) -> None:
    if args.dry_run:
        return
    if bool(args.output) == bool(args.output_dir):
        _fail("Error: process needs exactly one of -o/--output or -O/--output-dir")
    if args.output and len(args.input) > 1:
        _fail("Error: several inputs need -O/--output-dir")
    if args.jobs < 1:
        _fail("Error: --jobs must be at least 1")


def main(argv: list[str] | None = None) -> None:
    """Entry point of the ``pcmfx`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        sys.exit(0)
    if handler is cmd_process:
        _check_process_args(args)
    handler(args)


if __name__ == "__main__":
    main()
