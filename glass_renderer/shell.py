"""
GPU Blur - Imperative Shell

Runs the hardware blur tier: a separable Gaussian blur shader executed in
a ModernGL standalone context (no window required).

Follows functional core, imperative shell pattern:
- stackblur.py / core.py: Pure transformations (testable, predictable)
- This module: GPU operations (side effects, resources)
"""

from typing import Optional

import moderngl
import numpy as np

from .errors import BlurBackendError
from .timing import StageTimings, time_stage


# ============================================================================
# Shader Source Code
# ============================================================================

# Full-screen quad vertex shader for post-processing passes
FULLSCREEN_VERTEX_SHADER = """
#version 330

in vec2 in_position;
out vec2 v_texcoord;

void main() {
    gl_Position = vec4(in_position, 0.0, 1.0);
    v_texcoord = in_position * 0.5 + 0.5;  // Convert from [-1,1] to [0,1]
}
"""

# Gaussian blur fragment shader (separable, single direction)
BLUR_FRAGMENT_SHADER = """
#version 330

in vec2 v_texcoord;
out vec4 f_color;

uniform sampler2D u_texture;
uniform vec2 u_direction;   // (1,0) for horizontal, (0,1) for vertical
uniform int u_radius;       // Taps on each side of the center
uniform float u_sigma;      // Gaussian standard deviation in pixels

void main() {
    vec2 pixel_size = 1.0 / vec2(textureSize(u_texture, 0));

    vec4 color = vec4(0.0);
    float total_weight = 0.0;

    // Sampler wraps with CLAMP_TO_EDGE, so taps past the border repeat the edge texel
    for (int i = -u_radius; i <= u_radius; i++) {
        float x = float(i);
        float weight = exp(-(x * x) / (2.0 * u_sigma * u_sigma));
        color += texture(u_texture, v_texcoord + u_direction * pixel_size * x) * weight;
        total_weight += weight;
    }

    f_color = vec4((color / total_weight).rgb, 1.0);
}
"""


def blur_sigma(radius: float) -> float:
    """Gaussian sigma for a blur radius (radius covers ~3 sigma)"""
    return max(radius / 3.0, 0.5)


# ============================================================================
# GPU Context and Resource Management
# ============================================================================

class GpuBlurContext:
    """Standalone OpenGL context with a compiled two-pass blur program

    Per-image textures and framebuffers are created for each blur() call and
    released before it returns; the context and program live until cleanup().
    """

    def __init__(self, enable_timing: bool = False):
        """Create the GL context and compile the blur program

        Side effects:
        - Creates OpenGL context
        - Compiles the blur shader program

        Raises:
            BlurBackendError: No usable standalone context or shader compile failure
        """
        self.timings = StageTimings() if enable_timing else None
        try:
            self.ctx = moderngl.create_standalone_context()
        except Exception as e:
            raise BlurBackendError(f"Cannot create standalone GL context: {e}") from e

        try:
            self.blur_prog = self.ctx.program(
                vertex_shader=FULLSCREEN_VERTEX_SHADER,
                fragment_shader=BLUR_FRAGMENT_SHADER
            )
        except Exception as e:
            self.ctx.release()
            raise BlurBackendError(f"Blur shader failed to compile: {e}") from e

        fullscreen_quad = np.array([
            [-1, -1],  # Bottom-left
            [ 1, -1],  # Bottom-right
            [-1,  1],  # Top-left
            [ 1,  1],  # Top-right
        ], dtype='f4')
        self.fullscreen_vbo = self.ctx.buffer(fullscreen_quad.tobytes())
        self.vao = self.ctx.vertex_array(
            self.blur_prog,
            [(self.fullscreen_vbo, '2f', 'in_position')]
        )

    def _make_target(self, width: int, height: int, data: Optional[bytes] = None):
        texture = self.ctx.texture((width, height), 4, data=data)
        texture.filter = (moderngl.NEAREST, moderngl.NEAREST)
        texture.repeat_x = False
        texture.repeat_y = False
        return texture

    def blur(self, pixels: np.ndarray, radius: float) -> np.ndarray:
        """Blur an RGBA uint8 array on the GPU

        Texture rows are uploaded and read back in the same order, so no
        vertical flip is needed.

        Side effects:
        - Uploads the image to GPU memory
        - Executes two draw calls (horizontal, vertical)
        - Allocates/deallocates GPU textures and framebuffers

        Args:
            pixels: uint8 array (height, width, 4)
            radius: Blur radius in pixels

        Returns:
            uint8 array (height, width, 4), alpha 255
        """
        height, width = pixels.shape[:2]
        taps = max(0, int(round(radius)))

        with time_stage(self.timings, 'gpu_upload'):
            source = self._make_target(width, height, np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())
            horizontal = self._make_target(width, height)
            vertical = self._make_target(width, height)
            horizontal_fbo = self.ctx.framebuffer(color_attachments=[horizontal])
            vertical_fbo = self.ctx.framebuffer(color_attachments=[vertical])

        try:
            self.blur_prog['u_texture'].value = 0
            self.blur_prog['u_radius'].value = taps
            self.blur_prog['u_sigma'].value = blur_sigma(taps)

            with time_stage(self.timings, 'gpu_blur_h'):
                source.use(location=0)
                self.blur_prog['u_direction'].value = (1.0, 0.0)
                horizontal_fbo.use()
                self.vao.render(moderngl.TRIANGLE_STRIP)

            with time_stage(self.timings, 'gpu_blur_v'):
                horizontal.use(location=0)
                self.blur_prog['u_direction'].value = (0.0, 1.0)
                vertical_fbo.use()
                self.vao.render(moderngl.TRIANGLE_STRIP)

            with time_stage(self.timings, 'gpu_read'):
                raw = vertical_fbo.read(components=4)
                return np.frombuffer(raw, dtype='u1').reshape((height, width, 4)).copy()
        except moderngl.Error as e:
            raise BlurBackendError(f"GPU blur failed: {e}") from e
        finally:
            horizontal_fbo.release()
            vertical_fbo.release()
            source.release()
            horizontal.release()
            vertical.release()

    def cleanup(self):
        """Release GPU resources

        Side effects:
        - Frees the program and vertex buffers
        - Destroys OpenGL context
        """
        self.vao.release()
        self.fullscreen_vbo.release()
        self.blur_prog.release()
        self.ctx.release()

    def __enter__(self):
        """Context manager support"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager cleanup"""
        self.cleanup()
