"""CLI for handcode: ``handcode info``, ``handcode replay`` and ``handcode verify``."""

import argparse
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="handcode",
        description="Hand gesture library tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  handcode info ./gestures                    # Classes and codebook thresholds
  handcode replay ./gestures poses.jsonl      # Recognize a recorded pose stream
  handcode replay ./gestures poses.jsonl --mode knn -k 5
  handcode verify ./gestures                  # Check samples.md5 manifests
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    sub = parser.add_subparsers(dest="command")

    # handcode info
    info_p = sub.add_parser("info", help="Show library classes and codebook")
    info_p.add_argument("library", help="Gesture library directory")
    info_p.add_argument(
        "--k-factor",
        type=float,
        default=None,
        help="Threshold looseness multiplier (default: 2.0)",
    )

    # handcode replay
    replay_p = sub.add_parser("replay", help="Run the recognizer over a JSONL pose stream")
    replay_p.add_argument("library", help="Gesture library directory")
    replay_p.add_argument(
        "stream",
        help="JSONL file: one pose per line ([[x, y], ...], {\"landmarks\": ...} or {\"features\": ...})",
    )
    replay_p.add_argument("--config", "-c", default=None, help="Recognizer YAML config")
    replay_p.add_argument("--mode", choices=["codebook", "knn"], default=None)
    replay_p.add_argument("-k", type=int, default=None, help="k-NN neighbourhood size")
    replay_p.add_argument("--threshold", type=float, default=None, help="Global k-NN threshold")
    replay_p.add_argument("--window", type=int, default=None, help="Averaging window (frames)")
    replay_p.add_argument("--min-streak", type=int, default=None, help="Frames to confirm a class")
    replay_p.add_argument("--k-factor", type=float, default=None)
    replay_p.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not fall back to k-NN when the codebook rejects a frame",
    )

    # handcode verify
    verify_p = sub.add_parser("verify", help="Verify sample integrity manifests")
    verify_p.add_argument("library", help="Gesture library directory")

    return parser


def _build_config(args: argparse.Namespace):
    """Merge --config with explicit flags (flags win)."""
    from handcode.config import RecognizerConfig

    config = RecognizerConfig.from_yaml(args.config) if args.config else RecognizerConfig()
    overrides = {
        "mode": args.mode,
        "k": args.k,
        "threshold": args.threshold,
        "window_size": args.window,
        "min_streak": args.min_streak,
        "k_factor": args.k_factor,
    }
    data = config.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    if args.no_fallback:
        data["fallback"] = False
    return RecognizerConfig.from_dict(data)


def _load_library_or_exit(path: str):
    from handcode.persistence import load_library

    try:
        return load_library(path)
    except FileNotFoundError as e:
        print(e, file=sys.stderr)
        sys.exit(1)


def _cmd_info(args: argparse.Namespace) -> None:
    """Handle ``handcode info``."""
    from handcode.codebook import DEFAULT_K_FACTOR, build_codebook

    library = _load_library_or_exit(args.library)
    k_factor = args.k_factor if args.k_factor is not None else DEFAULT_K_FACTOR
    codebook = build_codebook(library, k_factor=k_factor)

    print(f"Library: {args.library}")
    print(f"  classes: {len(library)}  samples: {library.sample_count}  k_factor: {k_factor}")
    for gesture_class in sorted(library, key=lambda c: c.name):
        entry = codebook.entry_for(gesture_class.code)
        if entry is None:
            print(f"  {gesture_class.name:20s}  {gesture_class.code[:8]}  samples=0  (excluded)")
            continue
        print(
            f"  {gesture_class.name:20s}  {gesture_class.code[:8]}  "
            f"samples={len(gesture_class.samples):<4d} threshold={entry.threshold:.4f}"
        )


def _parse_frame(line: str):
    """Return ("landmarks" | "features", payload) for one JSONL line."""
    obj = json.loads(line)
    if isinstance(obj, dict):
        if "features" in obj:
            return "features", obj["features"]
        return "landmarks", obj.get("landmarks")
    return "landmarks", obj


def _cmd_replay(args: argparse.Namespace) -> None:
    """Handle ``handcode replay``."""
    from handcode.recognizer import GestureRecognizer

    stream = Path(args.stream)
    if not stream.is_file():
        print(f"Stream file not found: {stream}", file=sys.stderr)
        sys.exit(1)

    recognizer = GestureRecognizer(_build_config(args))
    recognizer.set_library(_load_library_or_exit(args.library))

    frame_count = 0
    confirmed = 0
    with open(stream, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                kind, payload = _parse_frame(line)
            except ValueError as e:
                logger.warning("Line %d: invalid JSON (%s)", line_no, e)
                continue

            if kind == "features":
                result = recognizer.recognize_from_features(payload)
            else:
                result = recognizer.recognize_from_landmarks(payload)
            frame_count += 1

            if result is not None:
                confirmed += 1
                print(f"  frame={frame_count - 1} {result.class_name} distance={result.distance:.4f}")

    print(f"\nDone: {frame_count} frames, {confirmed} confirmed")


def _cmd_verify(args: argparse.Namespace) -> None:
    """Handle ``handcode verify``."""
    from handcode.persistence import verify_class

    root = Path(args.library)
    if not root.is_dir():
        print(f"Gesture library directory not found: {root}", file=sys.stderr)
        sys.exit(1)

    failures = 0
    for class_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        mismatched = verify_class(class_dir)
        status = "ok" if not mismatched else f"{len(mismatched)} mismatched"
        print(f"  {class_dir.name:20s}  {status}")
        for rel_path in mismatched:
            print(f"    {rel_path}")
        failures += len(mismatched)

    if failures:
        sys.exit(1)


def main(argv=None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    if args.command == "info":
        _cmd_info(args)
    elif args.command == "replay":
        _cmd_replay(args)
    elif args.command == "verify":
        _cmd_verify(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
