"""Boolean operations demo: cut, join or intersect two blocks and export STL.

A 40 x 40 x 20 block is combined with a smaller block that overlaps one
of its corners.  The result is written to an STL file so it can be
inspected in any mesh viewer.

Usage:
    python solid_boolean_demo.py --op subtract --output build/block.stl
    python solid_boolean_demo.py --op union --ascii
    python solid_boolean_demo.py --op trim --config polysolid.yaml
"""

from pathlib import Path

from loguru import logger

from polysolid import Model, solids
from polysolid.config import configure_logging, load_settings, set_settings
from polysolid.geom import point
from polysolid.geometry_checks import container_oriented, container_watertight
from polysolid.io import write_stl
from polysolid.primitives import prism

OPERATIONS = {
    'union': solids.union,
    'subtract': solids.subtract,
    'trim': solids.trim,
    'intersect': solids.intersect,
}


def make_operands(model):
    block = model.entities.add_group('block')
    prism(block.entities, 40.0, 40.0, 20.0, center=point(0, 0, 10))
    block.material = 'aluminium'

    tool = model.entities.add_group('tool')
    prism(tool.entities, 20.0, 20.0, 30.0, center=point(20, 20, 15))
    return block, tool


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Run a boolean operation on two blocks")
    parser.add_argument("--op", choices=sorted(OPERATIONS), default="subtract",
                        help="Operation to apply (default: subtract)")
    parser.add_argument("--output", type=Path, default=Path("build/solid_boolean.stl"),
                        help="STL file to write")
    parser.add_argument("--ascii", action="store_true", help="Write ASCII STL instead of binary")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML settings file (defaults to $POLYSOLID_CONFIG)")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    args = parser.parse_args()

    settings = load_settings(args.config)
    set_settings(settings)
    configure_logging(args.log_level or settings.log_level)

    model = Model()
    block, tool = make_operands(model)
    result = OPERATIONS[args.op](block, tool)
    if result is None:
        logger.error("operands are not solid, nothing was done")
        raise SystemExit(1)

    for check in (container_watertight(block), container_oriented(block)):
        for warning in check.warnings:
            logger.warning(warning)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    write_stl(block, args.output, binary=not args.ascii, name=args.op)
    print(f"{args.op}: solid={result} faces={len(block.entities.faces)} "
          f"volume={block.volume:.1f}")
    print(f"STL written to {args.output}")


if __name__ == "__main__":
    main()
