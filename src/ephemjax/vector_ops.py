"""Vector operations on 3-vectors and 6-component state vectors.

A state vector is a ``(6,)`` array: position followed by velocity.  In
polar form the components are ``[lon, lat, r, dlon, dlat, dr]``.  Every
function here accepts either a ``(3,)`` position or a ``(6,)`` state and
treats the velocity half the same way as the position half where that
makes sense (rotations, differences).

The single-axis rotation matrices follow the passive convention of
Montenbruck & Gill: ``Rx(eps) @ x`` expresses an equatorial vector in
the ecliptic frame of obliquity ``eps``.

All functions use JAX operations and are compatible with ``jax.jit``
and ``jax.vmap``.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import RAD2DEG
from ephemjax.utils import normalize_angle, to_radians

# Indices of the angular components of a polar state vector
_ANGULAR = jnp.array([1.0, 1.0, 0.0, 1.0, 1.0, 0.0])


def Rx(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the x-axis.

    Args:
        angle: Counter-clockwise angle of rotation as viewed looking back
            along the positive direction of the rotation axis.
        use_degrees: Handle input in degrees. Default: ``False``

    Returns:
        jax.Array: Rotation matrix, shape ``(3, 3)``.

    References:

        1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and Applications*, 2012, p.27.
    """
    angle = to_radians(angle, use_degrees)
    c = jnp.cos(angle)
    s = jnp.sin(angle)
    one = jnp.ones_like(c)
    zero = jnp.zeros_like(c)
    return jnp.array([[one, zero, zero],
                      [zero, c, s],
                      [zero, -s, c]])


def Ry(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the y-axis.

    Args:
        angle: Counter-clockwise angle of rotation.
        use_degrees: Handle input in degrees. Default: ``False``

    Returns:
        jax.Array: Rotation matrix, shape ``(3, 3)``.
    """
    angle = to_radians(angle, use_degrees)
    c = jnp.cos(angle)
    s = jnp.sin(angle)
    one = jnp.ones_like(c)
    zero = jnp.zeros_like(c)
    return jnp.array([[c, zero, -s],
                      [zero, one, zero],
                      [s, zero, c]])


def Rz(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Rotation matrix, for a rotation about the z-axis.

    Args:
        angle: Counter-clockwise angle of rotation.
        use_degrees: Handle input in degrees. Default: ``False``

    Returns:
        jax.Array: Rotation matrix, shape ``(3, 3)``.
    """
    angle = to_radians(angle, use_degrees)
    c = jnp.cos(angle)
    s = jnp.sin(angle)
    one = jnp.ones_like(c)
    zero = jnp.zeros_like(c)
    return jnp.array([[c, s, zero],
                      [-s, c, zero],
                      [zero, zero, one]])


# ---------------------------------------------------------------------------
# Rotations of state vectors
# ---------------------------------------------------------------------------


def rotate_state(matrix: ArrayLike, x: ArrayLike) -> Array:
    """Apply a 3x3 matrix to the position and, if present, velocity half.

    Args:
        matrix: Rotation matrix, shape ``(3, 3)``.
        x: Position ``(3,)`` or state ``(6,)``.

    Returns:
        jax.Array: Rotated vector with the same shape as *x*.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    matrix = jnp.asarray(matrix, dtype=get_dtype())
    if x.shape[-1] == 3:
        return matrix @ x
    return jnp.concatenate([matrix @ x[:3], matrix @ x[3:6]])


def rotate_x(x: ArrayLike, angle: ArrayLike) -> Array:
    """Rotate a vector about the x-axis by a signed angle.

    ``rotate_x(x_equatorial, eps)`` gives ecliptic coordinates and
    ``rotate_x(x_ecliptic, -eps)`` gives equatorial coordinates.

    Args:
        x: Position ``(3,)`` or state ``(6,)``.
        angle: Rotation angle [rad].

    Returns:
        jax.Array: Rotated vector.
    """
    return rotate_state(Rx(angle), x)


def rotate_z(x: ArrayLike, angle: ArrayLike) -> Array:
    """Rotate a vector about the z-axis by a signed angle.

    Args:
        x: Position ``(3,)`` or state ``(6,)``.
        angle: Rotation angle [rad].

    Returns:
        jax.Array: Rotated vector.
    """
    return rotate_state(Rz(angle), x)


# ---------------------------------------------------------------------------
# Products and differences
# ---------------------------------------------------------------------------


def dot(a: ArrayLike, b: ArrayLike) -> Array:
    """Dot product of the position parts of two vectors."""
    a = jnp.asarray(a, dtype=get_dtype())
    b = jnp.asarray(b, dtype=get_dtype())
    return jnp.dot(a[:3], b[:3])


def cross(a: ArrayLike, b: ArrayLike) -> Array:
    """Cross product of the position parts of two vectors."""
    a = jnp.asarray(a, dtype=get_dtype())
    b = jnp.asarray(b, dtype=get_dtype())
    return jnp.cross(a[:3], b[:3])


def norm(a: ArrayLike) -> Array:
    """Euclidean length of the position part of a vector."""
    a = jnp.asarray(a, dtype=get_dtype())
    return jnp.sqrt(jnp.dot(a[:3], a[:3]))


def difference(a: ArrayLike, b: ArrayLike) -> Array:
    """Component-wise difference ``a - b`` of two vectors of equal shape."""
    return jnp.asarray(a, dtype=get_dtype()) - jnp.asarray(b, dtype=get_dtype())


def angular_separation(a: ArrayLike, b: ArrayLike) -> Array:
    """Angle between the position parts of two cartesian vectors [rad].

    Uses ``atan2(|a x b|, a . b)``, which stays accurate for both tiny and
    near-antipodal separations.
    """
    return jnp.arctan2(norm(cross(a, b)), dot(a, b))


# ---------------------------------------------------------------------------
# Cartesian / polar conversion
# ---------------------------------------------------------------------------


def _cartesian_to_polar_position(p: Array) -> Array:
    rxy = jnp.sqrt(p[0] * p[0] + p[1] * p[1])
    r = jnp.sqrt(rxy * rxy + p[2] * p[2])
    lon = normalize_angle(jnp.arctan2(p[1], p[0]))
    # atan2 gives +-pi/2 on the pole and 0 for the zero vector
    lat = jnp.arctan2(p[2], rxy)
    return jnp.array([lon, lat, r])


def cartesian_to_polar(x: ArrayLike) -> Array:
    """Convert cartesian coordinates to polar coordinates.

    Longitude is returned in ``[0, 2pi)``, latitude in ``[-pi/2, pi/2]``.
    For a state vector the angular rates follow the standard spherical
    formulas.  Degenerate inputs are resolved so that the conversion stays
    invertible:

    - zero position: direction and ``dr`` are taken from the velocity;
    - position on the pole: the longitude is the direction of the
      horizontal velocity and the motion is expressed as ``dlat``;
    - zero velocity: all rates are zero.

    Args:
        x: Cartesian ``[x, y, z]`` or ``[x, y, z, vx, vy, vz]``.

    Returns:
        jax.Array: ``[lon, lat, r]`` or ``[lon, lat, r, dlon, dlat, dr]``
            in radians and the input length/time units.

    Examples:
        ```python
        import jax.numpy as jnp
        from ephemjax.vector_ops import cartesian_to_polar
        cartesian_to_polar(jnp.array([0.0, 1.0, 0.0]))  # [pi/2, 0, 1]
        ```
    """
    x = jnp.asarray(x, dtype=get_dtype())
    if x.shape[-1] == 3:
        return _cartesian_to_polar_position(x)

    pos = x[:3]
    vel = x[3:6]
    lon, lat, r = _cartesian_to_polar_position(pos)
    rxy = jnp.sqrt(pos[0] * pos[0] + pos[1] * pos[1])

    rxy_s = jnp.where(rxy > 0.0, rxy, 1.0)
    r_s = jnp.where(r > 0.0, r, 1.0)

    coslon = jnp.where(rxy > 0.0, pos[0] / rxy_s, 1.0)
    sinlon = jnp.where(rxy > 0.0, pos[1] / rxy_s, 0.0)
    coslat = rxy / r_s
    sinlat = pos[2] / r_s

    # Velocity in the local (radial-in-plane, east, north) frame
    xx3 = vel[0] * coslon + vel[1] * sinlon
    xx4 = -vel[0] * sinlon + vel[1] * coslon

    dlon = jnp.where(rxy > 0.0, xx4 / rxy_s, 0.0)
    dlat = (-sinlat * xx3 + coslat * vel[2]) / r_s
    dr = coslat * xx3 + sinlat * vel[2]

    # On the pole, move along the meridian of the horizontal velocity
    on_pole = (rxy == 0.0) & (r > 0.0)
    vh = jnp.sqrt(vel[0] * vel[0] + vel[1] * vel[1])
    lon_pole = jnp.where(vh > 0.0, normalize_angle(jnp.arctan2(vel[1], vel[0])), 0.0)
    lon = jnp.where(on_pole, lon_pole, lon)
    dlat = jnp.where(on_pole, -jnp.sign(pos[2]) * vh / r_s, dlat)

    # Zero position: direction of motion
    at_origin = r == 0.0
    vlon, vlat, vr = _cartesian_to_polar_position(vel)
    lon = jnp.where(at_origin, vlon, lon)
    lat = jnp.where(at_origin, vlat, lat)
    dlon = jnp.where(at_origin, 0.0, dlon)
    dlat = jnp.where(at_origin, 0.0, dlat)
    dr = jnp.where(at_origin, vr, dr)

    return jnp.array([lon, lat, r, dlon, dlat, dr])


def polar_to_cartesian(x: ArrayLike) -> Array:
    """Convert polar coordinates to cartesian coordinates.

    Args:
        x: ``[lon, lat, r]`` or ``[lon, lat, r, dlon, dlat, dr]`` in radians.

    Returns:
        jax.Array: ``[x, y, z]`` or ``[x, y, z, vx, vy, vz]``.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    lon, lat, r = x[0], x[1], x[2]
    cl = jnp.cos(lon)
    sl = jnp.sin(lon)
    cb = jnp.cos(lat)
    sb = jnp.sin(lat)
    pos = jnp.array([r * cb * cl, r * cb * sl, r * sb])
    if x.shape[-1] == 3:
        return pos

    dlon, dlat, dr = x[3], x[4], x[5]
    vel = jnp.array([
        dr * cb * cl - r * sb * dlat * cl - r * cb * sl * dlon,
        dr * cb * sl - r * sb * dlat * sl + r * cb * cl * dlon,
        dr * sb + r * cb * dlat,
    ])
    return jnp.concatenate([pos, vel])


def polar_to_degrees(x: ArrayLike) -> Array:
    """Scale the angular components of a polar state from radians to degrees.

    Longitude, latitude and their rates are scaled; the radius and the
    radial rate are left unchanged.

    Args:
        x: Polar position ``(3,)`` or state ``(6,)`` in radians.

    Returns:
        jax.Array: Polar state with angles in degrees.
    """
    x = jnp.asarray(x, dtype=get_dtype())
    scale = (1.0 + _ANGULAR * (RAD2DEG - 1.0))[: x.shape[-1]]
    return x * scale


def polar_to_radians(x: ArrayLike) -> Array:
    """Inverse of :func:`polar_to_degrees`."""
    x = jnp.asarray(x, dtype=get_dtype())
    scale = (1.0 + _ANGULAR * (1.0 / RAD2DEG - 1.0))[: x.shape[-1]]
    return x * scale
