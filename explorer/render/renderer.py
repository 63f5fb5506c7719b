from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import moderngl
import numpy as np

from explorer.config import CLEAR_COLOR, FAR, FOG_COLOR, FOV_DEG, NEAR
from explorer.render.shaders import pick_glsl_version, shader_sources
from explorer.render.trees import build_tree_mesh, tree_shader_sources
from explorer.util.math import perspective
from explorer.world.chunk import TerrainMesh
from explorer.world.params import Color

log = logging.getLogger(__name__)

_HUD_VERT = """#version 150
in vec2 in_pos;
in vec2 in_uv;
out vec2 v_uv;
void main() {
    v_uv = in_uv;
    gl_Position = vec4(in_pos, 0.0, 1.0);
}
"""

_HUD_FRAG = """#version 150
uniform sampler2D u_tex;
in vec2 v_uv;
out vec4 f_color;
void main() {
    f_color = texture(u_tex, v_uv);
}
"""


@dataclass
class ChunkHandle:
    key: int
    vao: moderngl.VertexArray
    vbo: moderngl.Buffer
    ibo: moderngl.Buffer
    color: Color

    def release(self) -> None:
        self.vao.release()
        self.vbo.release()
        self.ibo.release()


class Renderer:
    """GPU side of the terrain: owns every chunk's buffers between submit and release."""

    def __init__(self, ctx: moderngl.Context, width: int, height: int, *, fog_start: float, fog_end: float) -> None:
        self.ctx = ctx
        self.width = width
        self.height = height
        self.fog_start = float(fog_start)
        self.fog_end = float(fog_end)

        vert, frag = shader_sources(ctx.version_code)
        self.prog = self.ctx.program(vertex_shader=vert, fragment_shader=frag)

        tvert, tfrag = tree_shader_sources(pick_glsl_version(ctx.version_code))
        self.tree_prog = self.ctx.program(vertex_shader=tvert, fragment_shader=tfrag)
        tvbo, tibo = build_tree_mesh()
        self._tree_vbo = self.ctx.buffer(tvbo.tobytes())
        self._tree_ibo = self.ctx.buffer(tibo.tobytes())
        self._tree_inst: moderngl.Buffer | None = None
        self._tree_vao: moderngl.VertexArray | None = None
        self._tree_count = 0

        self._chunks: Dict[int, ChunkHandle] = {}
        self._next_key = 0

        self._proj = perspective(FOV_DEG, width / height, NEAR, FAR).astype(np.float32)
        self._write_proj()

        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.disable(moderngl.CULL_FACE)

        # HUD quad (top-left)
        self._hud_prog = self.ctx.program(vertex_shader=_HUD_VERT, fragment_shader=_HUD_FRAG)
        quad = np.array([
            -0.98,  0.98, 0.0, 1.0,
            -0.40,  0.98, 1.0, 1.0,
            -0.98,  0.70, 0.0, 0.0,

            -0.40,  0.98, 1.0, 1.0,
            -0.40,  0.70, 1.0, 0.0,
            -0.98,  0.70, 0.0, 0.0,
        ], dtype=np.float32)
        self._hud_vbo = self.ctx.buffer(quad.tobytes())
        self._hud_vao = self.ctx.vertex_array(self._hud_prog, [(self._hud_vbo, "2f 2f", "in_pos", "in_uv")])
        self._hud_tex: moderngl.Texture | None = None
        self._hud_tex_size = (0, 0)

    # --- Render substrate ---
    def submit(self, mesh: TerrainMesh, color: Color) -> ChunkHandle:
        vbo = self.ctx.buffer(mesh.interleaved().tobytes())
        ibo = self.ctx.buffer(mesh.indices.astype(np.uint32).tobytes())
        vao = self.ctx.vertex_array(
            self.prog,
            [
                (vbo, "3f 3f 2f", "in_pos", "in_norm", "in_uv"),
            ],
            ibo,
        )
        handle = ChunkHandle(key=self._next_key, vao=vao, vbo=vbo, ibo=ibo, color=color)
        self._next_key += 1
        self._chunks[handle.key] = handle
        return handle

    def release(self, handle: ChunkHandle) -> None:
        if self._chunks.pop(handle.key, None) is None:
            log.warning("release of unknown chunk handle %d", handle.key)
            return
        handle.release()

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    # --- Frame ---
    def _write_proj(self) -> None:
        self.prog["u_proj"].write(self._proj.tobytes())
        self.tree_prog["u_proj"].write(self._proj.tobytes())

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.ctx.viewport = (0, 0, width, height)
        self._proj = perspective(FOV_DEG, width / height, NEAR, FAR).astype(np.float32)
        self._write_proj()

    def begin_frame(self) -> None:
        self.ctx.clear(*CLEAR_COLOR, 1.0)

    def set_common_uniforms(self, view: np.ndarray, cam_pos: np.ndarray, light_dir: np.ndarray) -> None:
        cam = (float(cam_pos[0]), float(cam_pos[1]), float(cam_pos[2]))
        light = (float(light_dir[0]), float(light_dir[1]), float(light_dir[2]))
        for prog in (self.prog, self.tree_prog):
            prog["u_view"].write(view.astype(np.float32).tobytes())
            prog["u_cam_pos"].value = cam
            prog["u_light_dir"].value = light
            prog["u_fog_color"].value = FOG_COLOR
            prog["u_fog_start"].value = self.fog_start
            prog["u_fog_end"].value = self.fog_end

    def draw_terrain(self) -> None:
        for ch in self._chunks.values():
            self.prog["u_color"].value = ch.color
            ch.vao.render()

    # --- Trees ---
    def set_tree_instances(self, instances: np.ndarray) -> None:
        if self._tree_vao is not None:
            self._tree_vao.release()
            self._tree_vao = None
        if self._tree_inst is not None:
            self._tree_inst.release()
            self._tree_inst = None
        self._tree_count = int(instances.shape[0])
        if self._tree_count == 0:
            return
        self._tree_inst = self.ctx.buffer(instances.astype(np.float32).tobytes())
        self._tree_vao = self.ctx.vertex_array(
            self.tree_prog,
            [
                (self._tree_vbo, "3f 3f 1f", "in_pos", "in_norm", "in_part"),
                (self._tree_inst, "3f 1f 1f 1f 1f 1f/i", "in_i_pos", "in_i_height", "in_i_rot", "in_i_kind", "in_i_c0", "in_i_c1"),
            ],
            self._tree_ibo,
        )

    def draw_trees(self) -> None:
        if self._tree_vao is not None and self._tree_count > 0:
            self._tree_vao.render(instances=self._tree_count)

    # --- HUD ---
    def hud_update_rgba(self, rgba_bytes: bytes, w: int, h: int) -> None:
        if self._hud_tex is None or self._hud_tex_size != (w, h):
            if self._hud_tex is not None:
                self._hud_tex.release()
            self._hud_tex = self.ctx.texture((w, h), 4, data=rgba_bytes)
            self._hud_tex.filter = (moderngl.NEAREST, moderngl.NEAREST)
            self._hud_tex.repeat_x = False
            self._hud_tex.repeat_y = False
            self._hud_tex_size = (w, h)
        else:
            self._hud_tex.write(rgba_bytes)

    def draw_hud(self) -> None:
        if self._hud_tex is None:
            return
        self.ctx.enable(moderngl.BLEND)
        self.ctx.blend_func = (moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA)
        self.ctx.disable(moderngl.DEPTH_TEST)
        self._hud_tex.use(location=0)
        self._hud_prog["u_tex"].value = 0
        self._hud_vao.render(mode=moderngl.TRIANGLES)
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.disable(moderngl.BLEND)

    def shutdown(self) -> None:
        if self._chunks:
            log.debug("renderer shutdown with %d live chunks", len(self._chunks))
        for ch in list(self._chunks.values()):
            ch.release()
        self._chunks.clear()
        self.set_tree_instances(np.zeros((0, 8), dtype=np.float32))
        if self._hud_tex is not None:
            self._hud_tex.release()
            self._hud_tex = None
        for obj in [self._hud_vao, self._hud_vbo, self._hud_prog, self._tree_vbo, self._tree_ibo, self.tree_prog, self.prog]:
            obj.release()
