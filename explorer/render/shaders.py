from __future__ import annotations

def pick_glsl_version(ctx_version_code: int) -> int:
    """Pick a GLSL version compatible with the active OpenGL context.

    - For OpenGL >= 3.3: use GLSL 330
    - Otherwise: GLSL 150 (OpenGL 3.2 core)
    """
    if ctx_version_code >= 330:
        return 330
    return 150

_VERT_BODY = """
in vec3 in_pos;
in vec3 in_norm;
in vec2 in_uv;

uniform mat4 u_proj;
uniform mat4 u_view;

out vec3 v_world_pos;
out vec3 v_norm;
out vec2 v_uv;

void main() {
    v_world_pos = in_pos;
    v_norm = in_norm;
    v_uv = in_uv;
    gl_Position = u_proj * u_view * vec4(in_pos, 1.0);
}
"""

_FRAG_BODY = """in vec3 v_world_pos;
in vec3 v_norm;
in vec2 v_uv;

uniform vec3 u_color;
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

    // One flat colour per chunk; a faint uv grain keeps large chunks readable.
    float grain = 0.97 + 0.03 * fract(sin(dot(floor(v_uv * 64.0), vec2(12.9898, 78.233))) * 43758.5453);
    vec3 base = u_color * grain;

    float ambient = 0.45;
    vec3 col = base * (ambient + 0.75 * diff);

    // Linear fog on full 3D distance
    float dist = length(v_world_pos - u_cam_pos);
    float fog_amount = clamp((dist - u_fog_start) / max(u_fog_end - u_fog_start, 1e-3), 0.0, 1.0);
    col = mix(col, u_fog_color, fog_amount);

    f_color = vec4(col, 1.0);
}"""

def shader_sources(ctx_version_code: int) -> tuple[str, str]:
    ver = pick_glsl_version(ctx_version_code)
    prefix = f"#version {ver}\n"
    return prefix + _VERT_BODY, prefix + _FRAG_BODY
