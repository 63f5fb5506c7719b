from __future__ import annotations

import argparse
import logging
import random

from explorer.app import run_app
from explorer.config import (
    APP_VERSION,
    DEFAULT_CHUNK_RESOLUTION,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FOG_END,
    DEFAULT_FOG_START,
    DEFAULT_HEIGHT_SCALE,
    DEFAULT_MOVE_SPEED,
    DEFAULT_NOISE,
    DEFAULT_NOISE_SCALE,
    DEFAULT_RENDER_DISTANCE,
    DEFAULT_SEED,
    DEFAULT_TREE_DENSITY,
    DEFAULT_TREE_SEED,
    DEFAULT_TREES,
)
from explorer.world.noise import NOISE_MODES
from explorer.world.params import ConfigError, TerrainConfig
from explorer.world.scatter import TreeConfig

log = logging.getLogger("explorer")


def _parse_seed(value: str) -> int:
    if value.lower() == "random":
        return random.randint(0, 2**31 - 1)
    return int(value)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="explorer", description=f"Procedural forest explorer with streamed terrain chunks (ModernGL + pygame) v{APP_VERSION}")
    p.add_argument("--seed", type=_parse_seed, default=DEFAULT_SEED, help="terrain seed, int or 'random' (default: 12345)")
    p.add_argument("--tree-seed", type=_parse_seed, default=DEFAULT_TREE_SEED, help="tree placement seed (default: 54321)")
    p.add_argument("--chunk-size", type=float, default=DEFAULT_CHUNK_SIZE, help="world units per chunk edge (default: 32.0)")
    p.add_argument("--render-distance", type=int, default=DEFAULT_RENDER_DISTANCE, help="loaded chunk radius, Chebyshev (default: 3)")
    p.add_argument("--height-scale", type=float, default=DEFAULT_HEIGHT_SCALE, help="elevation amplitude (default: 5.0)")
    p.add_argument("--noise-scale", type=float, default=DEFAULT_NOISE_SCALE, help="noise frequency per world unit (default: 0.1)")
    p.add_argument("--chunk-res", type=int, default=DEFAULT_CHUNK_RESOLUTION, help="grid cells per chunk edge (default: 32)")
    p.add_argument("--noise", choices=list(NOISE_MODES), default=DEFAULT_NOISE, help="height noise (simplex or value)")
    p.add_argument("--fog-start", type=float, default=DEFAULT_FOG_START, help="fog start distance")
    p.add_argument("--fog-end", type=float, default=DEFAULT_FOG_END, help="fog end distance")
    p.add_argument("--trees", dest="trees", action="store_true", default=DEFAULT_TREES, help="scatter trees (default on)")
    p.add_argument("--no-trees", dest="trees", action="store_false", help="disable trees")
    p.add_argument("--tree-density", type=float, default=DEFAULT_TREE_DENSITY, help="tree density in [0,1] (default 0.3)")
    p.add_argument("--move-speed", type=float, default=DEFAULT_MOVE_SPEED, help="walk speed (world units / sec)")
    p.add_argument("--wireframe", action="store_true", help="render wireframe")
    p.add_argument("--debug", action="store_true", help="enable debug overlay (HUD + logs)")
    return p.parse_args(argv)


def build_configs(args: argparse.Namespace) -> tuple[TerrainConfig, TreeConfig]:
    terrain = TerrainConfig(
        chunk_size=float(args.chunk_size),
        render_distance=int(args.render_distance),
        height_scale=float(args.height_scale),
        noise_scale=float(args.noise_scale),
        resolution=int(args.chunk_res),
    )
    trees = TreeConfig(density=float(args.tree_density))
    return terrain, trees


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[explorer] %(levelname)s %(name)s: %(message)s",
    )

    try:
        terrain, tree_cfg = build_configs(args)
    except ConfigError as e:
        raise SystemExit(f"explorer: invalid configuration: {e}") from e

    log.info("seed=%d tree_seed=%d noise=%s %s", args.seed, args.tree_seed, args.noise, terrain)

    run_app(
        terrain=terrain,
        seed=int(args.seed),
        tree_seed=int(args.tree_seed),
        noise_mode=str(args.noise),
        trees=bool(args.trees),
        tree_cfg=tree_cfg,
        move_speed=float(args.move_speed),
        fog_start=float(args.fog_start),
        fog_end=float(args.fog_end),
        wireframe=bool(args.wireframe),
        debug=bool(args.debug),
    )


if __name__ == "__main__":
    main()
