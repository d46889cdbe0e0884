"""Three-vector helpers used by frames, surfaces and patterns.

Vectors are numpy float arrays of length three.  Values stored on frames,
link points and surfaces are frozen with :func:`vec3` so that an array
handed out by one component cannot be modified behind another's back.
"""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

from .errors import DegenerateGeometryError

## tolerance used for orthonormality and closeness checks
epsilon = 1e-10

## tolerance for "nearly parallel" axis tests (1 - |cos| below this)
zero_tol = 1e-6

VectorLike = Union[Sequence[float], np.ndarray]

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])
ORIGIN = np.zeros(3)

for _v in (X_AXIS, Y_AXIS, Z_AXIS, ORIGIN):
    _v.flags.writeable = False


def vec3(x: Union[VectorLike, float], y: float = None, z: float = None) -> np.ndarray:
    """Return a read-only float vector.

    Accepts either a single length-3 sequence or three scalars.
    """
    if y is None and z is None:
        arr = np.array(x, dtype=float).reshape(-1)
    else:
        arr = np.array([x, y, z], dtype=float)
    if arr.shape != (3,):
        raise ValueError(f'expected a 3-vector, got shape {arr.shape}')
    if not np.all(np.isfinite(arr)):
        raise ValueError(f'non-finite component in vector: {arr}')
    arr.flags.writeable = False
    return arr


def mag(v: VectorLike) -> float:
    return float(np.linalg.norm(v))


def dot(a: VectorLike, b: VectorLike) -> float:
    return float(np.dot(a, b))


def cross(a: VectorLike, b: VectorLike) -> np.ndarray:
    return vec3(np.cross(a, b))


def unit(v: VectorLike) -> np.ndarray:
    """Return ``v`` scaled to length one."""
    m = mag(v)
    if m < epsilon:
        raise DegenerateGeometryError(f'zero-length vector cannot be normalised: {list(v)}')
    return vec3(np.asarray(v, dtype=float) / m)


def close(a: VectorLike, b: VectorLike, tol: float = epsilon) -> bool:
    return bool(np.allclose(a, b, rtol=0.0, atol=tol))


def isparallel(a: VectorLike, b: VectorLike, tol: float = zero_tol) -> bool:
    """True if ``a`` and ``b`` point along the same line (either sense)."""
    return abs(dot(unit(a), unit(b))) > 1.0 - tol


def orthonormalize(x: VectorLike, y: VectorLike) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Gram-Schmidt with ``y`` held fixed; returns ``(X, Y, Z)`` with Z = X x Y."""
    yu = unit(y)
    xr = np.asarray(x, dtype=float) - dot(x, yu) * yu
    xu = unit(xr)
    zu = unit(np.cross(xu, yu))
    return xu, yu, zu


def is_orthonormal(x: VectorLike, y: VectorLike, z: VectorLike,
                   tol: float = epsilon) -> bool:
    """Unit length, pairwise orthogonal and right handed within ``tol``."""
    for v in (x, y, z):
        if abs(mag(v) - 1.0) > tol:
            return False
    if abs(dot(x, y)) > tol or abs(dot(y, z)) > tol or abs(dot(x, z)) > tol:
        return False
    return close(np.cross(x, y), z, tol * 10)
