"""
Command-Line Interface

CLI for generating procedural tube and tree meshes from the command line.
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from pmg_policies import (
    OutputPolicy,
    PolicyValidationError,
    TreePolicy,
    TubePolicy,
    coerce_vec3,
    load_policy,
)

from .api import generate_tree, generate_tube, make_run_dir, save_mesh, save_tree, write_json
from .core.curves import CatmullRomCurve, CubicBezierCurve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshgen",
        description="Procedural Mesh Generation - tubes along curves and branching trees",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tree command
    tree_parser = subparsers.add_parser("tree", help="Grow a tree and export its mesh")
    tree_parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="JSON file with TreePolicy fields",
    )
    tree_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides the config)",
    )
    tree_parser.add_argument(
        "--generations", "-g",
        type=int,
        default=None,
        help="Number of tree levels (overrides the config)",
    )
    tree_parser.add_argument(
        "--save-tree",
        action="store_true",
        help="Also write the branch tree as JSON",
    )

    # Tube command
    tube_parser = subparsers.add_parser("tube", help="Sweep a tube along a curve")
    tube_parser.add_argument(
        "--points", "-p",
        type=str,
        required=True,
        help='Control points as "x,y,z;x,y,z;..."',
    )
    tube_parser.add_argument(
        "--curve",
        type=str,
        choices=["catmull_rom", "bezier"],
        default="catmull_rom",
        help="Curve type (default: catmull_rom)",
    )
    tube_parser.add_argument(
        "--closed",
        action="store_true",
        help="Close the curve and the tube into a loop",
    )
    tube_parser.add_argument(
        "--tubular-segments",
        type=int,
        default=20,
        help="Rings along the tube (default: 20)",
    )
    tube_parser.add_argument(
        "--radial-segments",
        type=int,
        default=8,
        help="Quads around the tube (default: 8)",
    )
    tube_parser.add_argument(
        "--radius", "-r",
        type=float,
        default=0.5,
        help="Tube radius (default: 0.5)",
    )
    tube_parser.add_argument(
        "--end-radius",
        type=float,
        default=None,
        help="Radius at the curve end for a tapered tube",
    )

    # Common arguments for all commands
    for p in [tree_parser, tube_parser]:
        p.add_argument(
            "--output", "-O",
            type=str,
            default="./output",
            help="Output directory (default: ./output)",
        )
        p.add_argument(
            "--name",
            type=str,
            default=None,
            help="Run directory name (default: run)",
        )
        p.add_argument(
            "--format", "-f",
            type=str,
            choices=["obj", "stl", "ply", "glb"],
            default="obj",
            help="Mesh file format (default: obj)",
        )
        p.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output",
        )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    output_policy = OutputPolicy(output_dir=args.output, file_format=args.format)

    try:
        if args.command == "tree":
            return run_tree(args, output_policy)
        elif args.command == "tube":
            return run_tube(args, output_policy)
    except PolicyValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return 1


def run_tree(args, output_policy: OutputPolicy) -> int:
    """Run the tree command."""
    policy = load_policy(args.config, TreePolicy) if args.config else TreePolicy()
    if args.generations is not None:
        policy.generations = args.generations

    result = generate_tree(policy, seed=args.seed)

    run_dir = make_run_dir(output_policy, run_name=args.name, kind="tree")
    mesh_path = save_mesh(result.mesh, "tree", output_policy, run_dir)
    if output_policy.save_reports:
        write_json(result.report, "tree_report.json", output_policy, run_dir)
    if args.save_tree:
        save_tree(result.tree, "tree.json", output_policy, run_dir)

    print(f"Branches: {len(result.tree)}")
    print(f"Vertices: {result.mesh.vertex_count}")
    print(f"Triangles: {result.mesh.triangle_count}")
    print(f"Mesh: {mesh_path}")
    return 0


def parse_points(text: str) -> List[Tuple[float, float, float]]:
    """Parse "x,y,z;x,y,z;..." into control points, rejecting malformed entries."""
    points = []
    for chunk in text.split(";"):
        if not chunk.strip():
            continue
        point = coerce_vec3(chunk, default=None) if chunk.count(",") == 2 else None
        if point is None:
            raise ValueError(f"bad control point '{chunk.strip()}'")
        points.append(point)
    return points


def run_tube(args, output_policy: OutputPolicy) -> int:
    """Run the tube command."""
    try:
        points = parse_points(args.points)
        if args.curve == "bezier":
            curve = CubicBezierCurve(points)
        else:
            curve = CatmullRomCurve(points, closed=args.closed)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    policy = TubePolicy(
        tubular_segments=args.tubular_segments,
        radial_segments=args.radial_segments,
        radius=args.radius,
        end_radius=args.end_radius,
        closed=args.closed,
    )
    mesh, report = generate_tube(curve, policy)

    run_dir = make_run_dir(output_policy, run_name=args.name, kind="tube")
    mesh_path = save_mesh(mesh, "tube", output_policy, run_dir)
    if output_policy.save_reports:
        write_json(report, "tube_report.json", output_policy, run_dir)

    print(f"Vertices: {mesh.vertex_count}")
    print(f"Triangles: {mesh.triangle_count}")
    print(f"Mesh: {mesh_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
