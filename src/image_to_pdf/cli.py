from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .artifacts import write_batch_manifest_json
from .contracts import MAX_ALPHA_PERCENT, EmitterName, ImageToPdfConfig
from .module import run_image_to_pdf_batch


def _alpha_percent(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if not (0 <= n <= MAX_ALPHA_PERCENT):
        raise argparse.ArgumentTypeError(f"must be within 0..{MAX_ALPHA_PERCENT}, got {n}")
    return n


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="image-to-pdf",
        description="Convert images to single-page PDFs at 300 DPI, optionally grayscaled and lightened.",
    )
    p.add_argument("files", nargs="+", type=Path, metavar="FILE", help="Input image files.")
    p.add_argument(
        "-g",
        "--to-gray",
        action="store_true",
        help="Reduce to single-channel luminance before anything else.",
    )
    p.add_argument(
        "-a",
        "--alpha",
        type=_alpha_percent,
        default=100,
        help="Percent of original intensity kept when blending toward white (0..255; 100 or more = unchanged, the default).",
    )
    p.add_argument(
        "--engine",
        choices=[e.value for e in EmitterName],
        default=EmitterName.PILLOW.value,
        help="PDF writer backend (pypdfium2 does not embed the document title).",
    )
    p.add_argument("--out-manifest", type=Path, default=None, help="Optional JSON manifest of the batch.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log per-step details.")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = ImageToPdfConfig(
        to_gray=args.to_gray,
        alpha_percent=args.alpha,
        engine=EmitterName(args.engine),
    )

    result = run_image_to_pdf_batch(config=config, image_files=args.files)
    if args.out_manifest is not None:
        write_batch_manifest_json(result=result, out_manifest=args.out_manifest)

    return 0 if result.ok else 2


if __name__ == "__main__":
    raise SystemExit(main())
