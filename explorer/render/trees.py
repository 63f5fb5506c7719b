from __future__ import annotations

import numpy as np


def tree_shader_sources(glsl_version: int) -> tuple[str, str]:
    """Instanced tree shader (no textures, lowpoly).

    Instance layout: in_i_pos(3), in_i_height(1), in_i_rot(1), in_i_kind(1), in_i_c0(1), in_i_c1(1)
    (8 floats, matching TreeScatter instances)
    """
    prefix = f"#version {glsl_version}\n"

    vert = prefix + """
in vec3 in_pos;
in vec3 in_norm;
in float in_part;

in vec3 in_i_pos;
in float in_i_height;
in float in_i_rot;
in float in_i_kind;
in float in_i_c0;
in float in_i_c1;

uniform mat4 u_proj;
uniform mat4 u_view;

out vec3 v_world_pos;
out vec3 v_norm;
out float v_part;
out float v_kind;
out vec2 v_c;

mat3 rot_y(float a) {
    float c = cos(a);
    float s = sin(a);
    return mat3(
        c, 0.0, -s,
        0.0, 1.0, 0.0,
        s, 0.0, c
    );
}

void main() {
    mat3 r = rot_y(in_i_rot);
    vec3 p = r * (in_pos * in_i_height) + in_i_pos;
    v_world_pos = p;
    v_norm = normalize(r * in_norm);
    v_part = in_part;
    v_kind = in_i_kind;
    v_c = vec2(in_i_c0, in_i_c1);
    gl_Position = u_proj * u_view * vec4(p, 1.0);
}
"""

    frag = prefix + """
in vec3 v_world_pos;
in vec3 v_norm;
in float v_part;
in float v_kind;
in vec2 v_c;

uniform vec3 u_light_dir;
uniform vec3 u_cam_pos;
uniform vec3 u_fog_color;
uniform float u_fog_start;
uniform float u_fog_end;

out vec4 f_color;

void main() {
    vec3 n = normalize(v_norm);
    vec3 l = normalize(u_light_dir);
    float diff = max(dot(n, l), 0.0);

    // part 0 = trunk, 1 = canopy; kind picks a darker or brighter canopy
    vec3 trunk = vec3(0.27, 0.18, 0.09) * v_c.x;
    vec3 canopy = mix(vec3(0.06, 0.38, 0.06), vec3(0.08, 0.55, 0.08), clamp(v_kind, 0.0, 1.0)) * v_c.y;
    vec3 base = mix(trunk, canopy, step(0.5, v_part));

    float ambient = 0.45;
    vec3 col = base * (ambient + 0.85 * diff);

    float dist = length(v_world_pos - u_cam_pos);
    float fog_amount = clamp((dist - u_fog_start) / max(u_fog_end - u_fog_start, 1e-3), 0.0, 1.0);
    col = mix(col, u_fog_color, fog_amount);

    f_color = vec4(col, 1.0);
}
"""

    return vert, frag


def build_tree_mesh(*, sides: int = 8, rings: int = 5) -> tuple[np.ndarray, np.ndarray]:
    """Return (vbo, ibo) for a unit-height tree, scaled per instance by tree height.

    Vertex layout: pos(3), norm(3), part(1) float32.
      - trunk: a prism of radius 0.06 from y=0 to y=1
      - canopy: a lowpoly sphere of radius 0.45 centred at y=1
    """
    verts: list[list[float]] = []
    idx: list[int] = []

    def add_vertex(p, n, part: float) -> int:
        verts.append([p[0], p[1], p[2], n[0], n[1], n[2], part])
        return len(verts) - 1

    # --- trunk prism ---
    r = 0.06
    for i in range(sides):
        a0 = (i / sides) * (2 * np.pi)
        a1 = ((i + 1) / sides) * (2 * np.pi)
        x0, z0 = float(np.cos(a0) * r), float(np.sin(a0) * r)
        x1, z1 = float(np.cos(a1) * r), float(np.sin(a1) * r)
        n0 = (float(np.cos(a0)), 0.0, float(np.sin(a0)))
        n1 = (float(np.cos(a1)), 0.0, float(np.sin(a1)))
        v00 = add_vertex((x0, 0.0, z0), n0, 0.0)
        v01 = add_vertex((x1, 0.0, z1), n1, 0.0)
        v10 = add_vertex((x0, 1.0, z0), n0, 0.0)
        v11 = add_vertex((x1, 1.0, z1), n1, 0.0)
        idx.extend([v00, v10, v01, v01, v10, v11])

    # --- canopy sphere (lat/long) ---
    radius = 0.45
    cy = 1.0
    base = len(verts)
    for j in range(rings + 1):
        phi = np.pi * j / rings
        for i in range(sides + 1):
            theta = 2 * np.pi * i / sides
            n = (float(np.sin(phi) * np.cos(theta)), float(np.cos(phi)), float(np.sin(phi) * np.sin(theta)))
            add_vertex((n[0] * radius, cy + n[1] * radius, n[2] * radius), n, 1.0)
    row = sides + 1
    for j in range(rings):
        for i in range(sides):
            a = base + j * row + i
            b = a + 1
            c = a + row
            d = c + 1
            idx.extend([a, b, c, b, d, c])

    vbo = np.array(verts, dtype=np.float32)
    ibo = np.array(idx, dtype=np.uint32)
    return vbo, ibo
