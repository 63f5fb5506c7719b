from __future__ import annotations

import logging
import time

import moderngl
import numpy as np
import pygame

from explorer.config import APP_VERSION, FPS_CAP, LIGHT_DIR, WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH
from explorer.render.camera import FreeLookCamera
from explorer.render.renderer import Renderer
from explorer.util.math import normalize
from explorer.world.mesh_builder import terrain_height
from explorer.world.noise import HeightField
from explorer.world.params import TerrainConfig
from explorer.world.scatter import TreeConfig, TreeScatter
from explorer.world.streaming import TerrainStreamer

log = logging.getLogger(__name__)


def _init_pygame_gl() -> None:
    pygame.init()
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, 3)
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, 3)
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE)
    pygame.display.gl_set_attribute(pygame.GL_DEPTH_SIZE, 24)
    pygame.display.gl_set_attribute(pygame.GL_DOUBLEBUFFER, 1)


def _surface_to_rgba_bytes(surf: pygame.Surface) -> tuple[bytes, int, int]:
    s = surf.convert_alpha()
    w, h = s.get_size()
    data = pygame.image.tostring(s, "RGBA", False)
    return data, w, h


def _set_mouse_grab(grabbed: bool) -> None:
    pygame.event.set_grab(grabbed)
    pygame.mouse.set_visible(not grabbed)
    pygame.mouse.get_rel()  # drop the jump accumulated while released


def _hud_surface(font: pygame.font.Font, lines: list[str]) -> pygame.Surface:
    pad = 8
    line_h = font.get_linesize()
    w = max(font.size(line)[0] for line in lines) + pad * 2
    h = line_h * len(lines) + pad * 2
    surf = pygame.Surface((w, h), pygame.SRCALPHA)
    surf.fill((20, 31, 46, 235))
    y = pad
    for line in lines:
        surf.blit(font.render(line, True, (250, 250, 250)), (pad, y))
        y += line_h
    return surf


def run_app(
    *,
    terrain: TerrainConfig,
    seed: int,
    tree_seed: int,
    noise_mode: str,
    trees: bool,
    tree_cfg: TreeConfig,
    move_speed: float,
    fog_start: float,
    fog_end: float,
    wireframe: bool,
    debug: bool,
) -> None:
    _init_pygame_gl()

    flags = pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE
    pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT), flags)
    pygame.display.set_caption(f"{WINDOW_TITLE} v{APP_VERSION} (seed={seed})")

    try:
        ctx = moderngl.create_context()
    except Exception as e:
        pygame.quit()
        raise RuntimeError("Failed to create ModernGL context (need OpenGL 3.2+)") from e

    log.debug("moderngl ctx version_code=%s vendor=%s renderer=%s", ctx.version_code, ctx.info.get("GL_VENDOR"), ctx.info.get("GL_RENDERER"))

    ctx.viewport = (0, 0, WINDOW_WIDTH, WINDOW_HEIGHT)
    if wireframe:
        ctx.wireframe = True

    renderer = Renderer(ctx, WINDOW_WIDTH, WINDOW_HEIGHT, fog_start=fog_start, fog_end=fog_end)

    field = HeightField(seed, mode=noise_mode)
    streamer = TerrainStreamer(terrain, field, renderer)
    scatter = TreeScatter(terrain, field, HeightField(tree_seed, mode=noise_mode), tree_cfg) if trees else None
    tree_version = -1

    def height_fn(x: float, z: float) -> float:
        return terrain_height(field, terrain, x, z)

    cam = FreeLookCamera(move_speed=move_speed)

    # Startup: eager load around the origin
    streamer.prime()

    _set_mouse_grab(True)
    light_dir = normalize(np.array(LIGHT_DIR, dtype=np.float32))

    pygame.font.init()
    font = pygame.font.SysFont("Menlo", 16) or pygame.font.Font(None, 16)
    fps_est = 0.0

    clock = pygame.time.Clock()
    running = True
    last_t = time.perf_counter()
    last_log = last_t
    last_hud = last_t

    try:
        while running:
            now = time.perf_counter()
            dt = min(now - last_t, 0.05)
            last_t = now

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    _set_mouse_grab(not pygame.event.get_grab())
                elif event.type == pygame.VIDEORESIZE:
                    w, h = max(64, event.w), max(64, event.h)
                    pygame.display.set_mode((w, h), flags)
                    renderer.resize(w, h)

            if pygame.event.get_grab():
                mdx, mdy = pygame.mouse.get_rel()
                cam.look(mdx, mdy)

            keys = pygame.key.get_pressed()
            forward = float(keys[pygame.K_w]) - float(keys[pygame.K_s])
            strafe = float(keys[pygame.K_d]) - float(keys[pygame.K_a])
            sprint = bool(keys[pygame.K_LSHIFT] or keys[pygame.K_RSHIFT])
            cam.update(dt, height_fn, forward=forward, strafe=strafe, sprint=sprint, jump=bool(keys[pygame.K_SPACE]))

            eye = cam.eye()
            streamer.advance(eye)
            if scatter is not None:
                scatter.update(eye)
                if scatter.version != tree_version:
                    tree_version = scatter.version
                    renderer.set_tree_instances(scatter.instances())

            if dt > 0:
                inst_fps = 1.0 / dt
                fps_est = (0.9 * fps_est + 0.1 * inst_fps) if fps_est > 0 else inst_fps

            renderer.begin_frame()
            renderer.set_common_uniforms(view=cam.view_matrix(), cam_pos=eye, light_dir=light_dir)
            renderer.draw_terrain()
            renderer.draw_trees()

            if debug:
                if now - last_hud >= 0.12:
                    last_hud = now
                    center = streamer.center
                    lines = [
                        f"{WINDOW_TITLE} v{APP_VERSION}",
                        f"pos=({cam.x:.1f}, {cam.y:.1f}, {cam.z:.1f}) fps~{fps_est:.0f}",
                        f"chunk=({center.x}, {center.z})" if center is not None else "chunk=-",
                        f"chunks={len(streamer.registry)} radius={terrain.render_distance} size={terrain.chunk_size:g}",
                        f"trees={len(scatter.trees) if scatter is not None else 0}",
                        "WASD move, Shift sprint, Space jump, Esc mouse",
                    ]
                    rgba, tw, th = _surface_to_rgba_bytes(_hud_surface(font, lines))
                    renderer.hud_update_rgba(rgba, tw, th)
                renderer.draw_hud()

                if now - last_log >= 1.0:
                    last_log = now
                    log.info("fps~%.0f chunks=%d gpu_chunks=%d", fps_est, len(streamer.registry), renderer.chunk_count)

            pygame.display.flip()

            if FPS_CAP and FPS_CAP > 0:
                clock.tick(FPS_CAP)
            else:
                clock.tick()
    finally:
        streamer.shutdown()
        renderer.shutdown()
        pygame.quit()
