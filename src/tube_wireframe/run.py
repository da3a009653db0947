#!/usr/bin/env python3
"""
Tube Wireframe - command line runner

Build tube wireframes for mesh files or built-in primitives.

Usage:
    tube-wireframe model.obj --modes quad triangle --thickness 0.03 -o outputs
    tube-wireframe --primitive torus --modes cross-hatch --format ply
    tube-wireframe --list-modes
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .cells import describe_modes
from .common.config import MODES, OutputMetadata, WireframeOptions
from .common.io import load_mesh, save_mesh
from .common.mesh_ops import compute_mesh_stats
from .exceptions import TubeWireframeError
from .mesh import FaceMesh, face_to_buffer_mesh
from .primitives import PRIMITIVES
from .wireframe import create_tube_wireframe, wireframe_edges

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("glb", "ply", "obj", "stl")


def run_one(
    mesh: FaceMesh,
    source: str,
    options: WireframeOptions,
    output_path: Path
) -> Dict:
    """Build one wireframe, save it with its metadata sidecar, return the metadata."""
    n_edges = len(wireframe_edges(mesh, options))
    wire = create_tube_wireframe(mesh, options.replace(buffer=False))
    buffer = face_to_buffer_mesh(wire)

    metadata = OutputMetadata(
        mode=options.mode,
        n_edges=n_edges,
        n_vertices=wire.n_vertices,
        n_triangles=wire.n_faces,
        index_dtype=str(buffer.index.dtype),
        source=source,
        options=options.to_dict(),
    )
    if wire.n_faces == 0:
        logger.warning(f"{source} [{options.mode}]: no edges, nothing to save")
        return metadata.to_dict()

    save_mesh(wire, output_path, metadata)
    result = metadata.to_dict()
    result["stats"] = compute_mesh_stats(wire)
    return result


def run_all(
    inputs: List[Tuple[str, FaceMesh]],
    modes: List[str],
    options: WireframeOptions,
    output_dir: Path,
    fmt: str = "glb"
) -> dict:
    """
    Build every (input, mode) combination.

    Args:
        inputs: (name, mesh) pairs
        modes: Pattern modes to build
        options: Base options; mode is replaced per run
        output_dir: Output directory
        fmt: Output file extension understood by trimesh

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "options": options.to_dict(),
        "modes": modes,
        "outputs": [],
        "errors": []
    }

    for name, mesh in inputs:
        logger.info(f"Processing: {name} ({mesh.n_vertices} verts, {mesh.n_faces} faces)")
        for mode in modes:
            if mode not in MODES:
                logger.warning(f"Unknown mode: {mode}")
            output_path = output_dir / f"{name}_{mode}.{fmt}"
            try:
                result = run_one(mesh, name, options.replace(mode=mode), output_path)
                entry = {"name": name, "mode": mode, "status": "empty", "metadata": result}
                if result["n_triangles"] > 0:
                    entry["status"] = "success"
                    entry["path"] = str(output_path)
                summary["outputs"].append(entry)
            except (TubeWireframeError, ValueError) as e:
                logger.error(f"{name} [{mode}] failed: {e}")
                summary["errors"].append({
                    "name": name,
                    "mode": mode,
                    "error": str(e)
                })

    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tube Wireframe - replace mesh edges with cylindrical tubes"
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        help="Mesh files to process (any format trimesh reads)"
    )
    parser.add_argument(
        "--primitive", "-p",
        choices=sorted(PRIMITIVES),
        action="append",
        default=[],
        help="Built-in primitive to process (repeatable)"
    )
    parser.add_argument(
        "--modes", "-m",
        nargs="+",
        default=["triangle"],
        help=f"Pattern modes ({', '.join(MODES)})"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON file with WireframeOptions fields"
    )
    parser.add_argument("--thickness", "-t", type=float, help="Tube radius")
    parser.add_argument("--radius-segments", type=int, help="Radial subdivisions")
    parser.add_argument("--length-segments", type=int, help="Length subdivisions")
    parser.add_argument("--open-ended", action="store_true", help="Omit tube caps")
    parser.add_argument(
        "--merge-input",
        action="store_true",
        help="Weld coincident input vertices before extracting edges"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=Path("outputs"),
        help="Output directory"
    )
    parser.add_argument(
        "--format", "-f",
        choices=list(OUTPUT_FORMATS),
        default="glb",
        help="Output format"
    )
    parser.add_argument(
        "--list-modes",
        action="store_true",
        help="Print the corner table of every mode and exit"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    return parser


def build_options(args: argparse.Namespace) -> WireframeOptions:
    options = WireframeOptions.from_json(args.config) if args.config else WireframeOptions()
    overrides = {}
    if args.thickness is not None:
        overrides["thickness"] = args.thickness
    if args.radius_segments is not None:
        overrides["radius_segments"] = args.radius_segments
    if args.length_segments is not None:
        overrides["length_segments"] = args.length_segments
    if args.open_ended:
        overrides["open_ended"] = True
    return options.replace(**overrides).validate()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.list_modes:
        for mode, pairs in describe_modes().items():
            print(f"{mode:22s} {' '.join(pairs)}")
        return 0

    try:
        options = build_options(args)
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Invalid options: {e}")
        return 1

    inputs: List[Tuple[str, FaceMesh]] = []
    for name in args.primitive:
        inputs.append((name, PRIMITIVES[name]()))
    for path in args.inputs:
        try:
            inputs.append((path.stem, load_mesh(path, merge=args.merge_input)))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {path}: {e}")
            return 1

    if not inputs:
        logger.error("No inputs given (pass mesh files or --primitive)")
        return 1

    logger.info(f"Processing {len(inputs)} inputs with modes {args.modes}")
    logger.info(f"Output: {args.output}")

    summary = run_all(
        inputs=inputs,
        modes=args.modes,
        options=options,
        output_dir=args.output,
        fmt=args.format
    )

    # Save summary
    summary_path = args.output / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"Summary saved to: {summary_path}")

    n_success = len(summary["outputs"])
    n_errors = len(summary["errors"])
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")

    return 1 if n_errors else 0


if __name__ == "__main__":
    sys.exit(main())
