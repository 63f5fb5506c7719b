from __future__ import annotations

import numpy as np

from explorer.config import (
    DEFAULT_EYE_HEIGHT,
    DEFAULT_GRAVITY,
    DEFAULT_MOUSE_SENSITIVITY,
    DEFAULT_MOVE_ACCEL,
    DEFAULT_MOVE_DAMPING,
    DEFAULT_MOVE_SPEED,
    DEFAULT_SPRINT_MULTIPLIER,
    PITCH_LIMIT,
    START_POSITION,
)
from explorer.util.math import clamp, direction_from_yaw_pitch, lerp_rate, look_at, normalize

# Horizontal speeds below this snap to zero.
_REST_EPS = 0.01
JUMP_SPEED = 5.0


class FreeLookCamera:
    """Walking first-person camera.

    - Mouse moves yaw/pitch (pitch clamped to avoid flipping).
    - WASD moves in the XZ plane along the view heading; sprint multiplies speed.
    - Gravity pulls the eye down to ``eye_height`` above the terrain.

    Coordinate conventions: +Y is up, yaw == 0 looks along +Z and positive
    mouse dx turns right (toward -X).
    """

    def __init__(
        self,
        *,
        move_speed: float = DEFAULT_MOVE_SPEED,
        sprint_multiplier: float = DEFAULT_SPRINT_MULTIPLIER,
        mouse_sensitivity: float = DEFAULT_MOUSE_SENSITIVITY,
        eye_height: float = DEFAULT_EYE_HEIGHT,
        gravity: float = DEFAULT_GRAVITY,
        accel: float = DEFAULT_MOVE_ACCEL,
        damping: float = DEFAULT_MOVE_DAMPING,
        position: tuple[float, float, float] = START_POSITION,
    ) -> None:
        self.move_speed = float(move_speed)
        self.sprint_multiplier = float(sprint_multiplier)
        self.mouse_sensitivity = float(mouse_sensitivity)
        self.eye_height = float(eye_height)
        self.gravity = float(gravity)
        self.accel = float(accel)
        self.damping = float(damping)

        self.x, self.y, self.z = (float(v) for v in position)
        self.vx = 0.0
        self.vy = 0.0
        self.vz = 0.0

        # Start looking slightly down toward +Z, like (0,5,0) -> (0,4,5).
        self.yaw = 0.0
        self.pitch = float(np.arctan2(-1.0, 5.0))
        self.on_ground = False

    def look(self, dx: float, dy: float) -> None:
        self.yaw -= float(dx) * self.mouse_sensitivity
        self.pitch = clamp(self.pitch - float(dy) * self.mouse_sensitivity, -PITCH_LIMIT, PITCH_LIMIT)

    def heading(self) -> tuple[np.ndarray, np.ndarray]:
        """(forward, right) unit vectors in the XZ plane."""
        fwd = np.array([float(np.sin(self.yaw)), 0.0, float(np.cos(self.yaw))], dtype=np.float32)
        right = normalize(np.cross(fwd, np.array([0.0, 1.0, 0.0], dtype=np.float32)))
        return fwd, right

    def update(
        self,
        dt: float,
        height_fn,
        *,
        forward: float = 0.0,
        strafe: float = 0.0,
        sprint: bool = False,
        jump: bool = False,
    ) -> None:
        """Advance one frame.

        Args:
            forward: -1..1 (back..forward)
            strafe: -1..1 (left..right)
        """
        dt = float(dt)
        fwd, right = self.heading()
        move = fwd * clamp(float(forward), -1.0, 1.0) + right * clamp(float(strafe), -1.0, 1.0)

        if float(np.linalg.norm(move)) > 0.0:
            move = normalize(move)
            speed = self.move_speed * (self.sprint_multiplier if sprint else 1.0)
            self.vx = lerp_rate(self.vx, float(move[0]) * speed, self.accel, dt)
            self.vz = lerp_rate(self.vz, float(move[2]) * speed, self.accel, dt)
        else:
            self.vx *= self.damping
            self.vz *= self.damping

        if jump and self.on_ground:
            self.vy = JUMP_SPEED
            self.on_ground = False

        self.x += self.vx * dt
        self.y += self.vy * dt
        self.z += self.vz * dt

        if abs(self.vx) < _REST_EPS:
            self.vx = 0.0
        if abs(self.vz) < _REST_EPS:
            self.vz = 0.0

        floor_y = float(height_fn(self.x, self.z)) + self.eye_height
        if self.y > floor_y:
            self.vy -= self.gravity * dt
            self.on_ground = False
        else:
            self.y = floor_y
            self.vy = max(self.vy, 0.0)
            self.on_ground = True

    def eye(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float32)

    def view_matrix(self) -> np.ndarray:
        eye = self.eye()
        target = eye + direction_from_yaw_pitch(self.yaw, self.pitch)
        up = np.array([0.0, 1.0, 0.0], dtype=np.float32)
        return look_at(eye, target, up)
