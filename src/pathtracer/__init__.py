"""Taichi-based Monte Carlo path tracer for sphere scenes.

The renderer traces jittered camera rays through a scene of spheres, scatters
them off diffuse and mirror materials, and averages the results into an 8-bit
RGB pixel buffer. All per-pixel work runs in parallel on Taichi's CPU backend.

Subpackages:
    core: Rays, sampling, the radiance integrator and the render loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse and mirror scattering functions
    scene: Scene container, host-side builder and preset scenes
    camera: Pinhole camera and primary ray generation
    output: Image export of finished pixel buffers
"""

__version__ = "0.1.0"
