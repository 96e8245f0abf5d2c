"""Vector algebra for host-side scene code and Taichi kernels.

This module provides two views of the same 3D vector math:

- ``Vector3``: an immutable value type used by the scene model, the editing
  session and the Python-facing intersection API. Every operation returns a
  new instance.
- ``ti.func`` helpers (``dot``, ``cross``, ``length``, ``safe_normalize``,
  ``distance``, ``reflect``) operating on ``vec3`` inside kernels.

Both views treat the zero vector the same way: normalizing it yields the zero
vector instead of dividing by zero.

Example:
    >>> a = Vector3(1.0, 0.0, 0.0)
    >>> b = Vector3(0.0, 1.0, 0.0)
    >>> a.cross(b)
    Vector3(x=0.0, y=0.0, z=1.0)
    >>> Vector3(0.0, 0.0, 0.0).normalize()
    Vector3(x=0.0, y=0.0, z=0.0)
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class Vector3:
    """An immutable 3D vector.

    Attributes:
        x: X component.
        y: Y component.
        z: Z component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Vector3":
        """Build a vector from any three-element iterable.

        Raises:
            ValueError: If the iterable does not hold exactly three values.
        """
        items = [float(v) for v in values]
        if len(items) != 3:
            raise ValueError(f"Expected 3 components, got {len(items)}")
        return cls(items[0], items[1], items[2])

    def add(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def subtract(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def multiply(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalize(self) -> "Vector3":
        """Return the unit vector in the same direction.

        The zero vector normalizes to the zero vector.
        """
        magnitude = self.length()
        if magnitude == 0.0:
            return Vector3(0.0, 0.0, 0.0)
        return Vector3(self.x / magnitude, self.y / magnitude, self.z / magnitude)

    def distance(self, other: "Vector3") -> float:
        return self.subtract(other).length()

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __add__(self, other: "Vector3") -> "Vector3":
        return self.add(other)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return self.subtract(other)

    def __mul__(self, scalar: float) -> "Vector3":
        return self.multiply(scalar)

    def __rmul__(self, scalar: float) -> "Vector3":
        return self.multiply(scalar)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z


# =============================================================================
# Kernel-side Vector Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Unlike ``tm.normalize``, a zero-length input returns the zero vector
    rather than NaN components.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    magnitude = tm.length(v)
    if magnitude > 0.0:
        result = v / magnitude
    return result


@ti.func
def distance(a: vec3, b: vec3) -> ti.f32:
    """Compute the distance between two points."""
    return tm.length(a - b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Conversions
# =============================================================================


def as_vector(value: Vector3 | Iterable[float]) -> Vector3:
    """Coerce a Vector3 or a three-element iterable into a Vector3."""
    if isinstance(value, Vector3):
        return value
    return Vector3.from_iterable(value)


def to_vec3(value: Vector3 | Iterable[float]) -> vec3:
    """Convert a host-side vector into a Taichi vec3 for kernel arguments."""
    v = as_vector(value)
    return vec3(v.x, v.y, v.z)
