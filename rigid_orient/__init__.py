"""
Rotation representation conversions supporting both NumPy and PyTorch backends.

Converts between rigid transforms, unit quaternions and euler angle triples, extracts
axis-angle pairs and builds look-at transforms.

Usage Examples
--------------
Euler angles <-> quaternion:
    quat = convert_euler_degrees_to_quaternion(np.array([90.0, 0.0, 0.0]))
    euler = convert_quaternion_to_euler_degrees(quat)

Euler angles <-> transform (fast or precise path):
    tf = convert_euler_degrees_to_transform(euler)
    tf = convert_euler_degrees_to_transform_precise(euler)
    tf = convert_euler_to_transform(euler, degrees=True, method="precise")
    euler = convert_transform_to_euler_degrees(tf)

Axis-angle:
    axis, angle = convert_quaternion_to_axis_angle(quat)

Look-at:
    tf = create_look_at(camera_pos, target_pos, forward_axis=Axis.Y_POSITIVE)

Conventions
-----------
- Right-handed coordinates, world +Z is up
- Quaternion: xyzw (matches SciPy/ROS convention)
- Euler: (x, y, z) angles composed as Rx @ Ry @ Rz (z applied first, then y, then x)
- Angles are degrees unless the function name says radians
- Rotation matrix: (..., 3, 3); transform matrix: (..., 4, 4)
"""

# Types and constants
from ._core import (
    ArrayLike,
    Axis,
    Backend,
    BackendMismatchError,
    DEG_TO_RAD,
    EPS,
    EulerConversionMethod,
    GIMBAL_LOCK_EPS,
    LOOK_AT_PARALLEL_EPS,
    RAD_TO_DEG,
    SMALL_ANGLE_THRESHOLD,
    VectorLike,
)

# Rotation conversion functions
from .rotation_conversions import (
    # Angle units
    rad_to_deg,
    deg_to_rad,
    # Quaternion
    quaternion_to_matrix,
    matrix_to_quaternion,
    quaternion_normalize,
    quaternion_multiply,
    # Euler angles
    euler_radians_to_quaternion,
    euler_degrees_to_quaternion,
    quaternion_to_euler_radians,
    quaternion_to_euler_degrees,
    euler_radians_to_matrix_precise,
    euler_degrees_to_matrix_precise,
    convert_euler_radians_to_quaternion,
    convert_euler_degrees_to_quaternion,
    convert_quaternion_to_euler_radians,
    convert_quaternion_to_euler_degrees,
    # Axis-angle
    AxisAngle,
    DEFAULT_AXIS,
    quaternion_to_axis_angle,
    convert_quaternion_to_axis_angle,
    axis_angle_to_quaternion,
)

# Classes
from .transform import Transform

# Euler <-> transform
from .euler_transform import (
    convert_transform_to_euler_radians,
    convert_transform_to_euler_degrees,
    convert_euler_radians_to_transform,
    convert_euler_degrees_to_transform,
    convert_euler_radians_to_transform_precise,
    convert_euler_degrees_to_transform_precise,
    convert_euler_to_transform,
)

# Look-at
from .look_at import create_look_at

# Metrics
from .metrics import geodesic_distance, quaternion_angular_distance

__all__ = [
    # Types
    "ArrayLike",
    "VectorLike",
    "Backend",
    "Axis",
    "EulerConversionMethod",
    "AxisAngle",
    # Constants
    "EPS",
    "SMALL_ANGLE_THRESHOLD",
    "GIMBAL_LOCK_EPS",
    "LOOK_AT_PARALLEL_EPS",
    "DEG_TO_RAD",
    "RAD_TO_DEG",
    "DEFAULT_AXIS",
    # Classes
    "Transform",
    "BackendMismatchError",
    # Angle units
    "rad_to_deg",
    "deg_to_rad",
    # Quaternion
    "quaternion_to_matrix",
    "matrix_to_quaternion",
    "quaternion_normalize",
    "quaternion_multiply",
    # Euler <-> quaternion
    "euler_radians_to_quaternion",
    "euler_degrees_to_quaternion",
    "quaternion_to_euler_radians",
    "quaternion_to_euler_degrees",
    "convert_euler_radians_to_quaternion",
    "convert_euler_degrees_to_quaternion",
    "convert_quaternion_to_euler_radians",
    "convert_quaternion_to_euler_degrees",
    # Euler -> matrix
    "euler_radians_to_matrix_precise",
    "euler_degrees_to_matrix_precise",
    # Euler <-> transform
    "convert_transform_to_euler_radians",
    "convert_transform_to_euler_degrees",
    "convert_euler_radians_to_transform",
    "convert_euler_degrees_to_transform",
    "convert_euler_radians_to_transform_precise",
    "convert_euler_degrees_to_transform_precise",
    "convert_euler_to_transform",
    # Axis-angle
    "quaternion_to_axis_angle",
    "convert_quaternion_to_axis_angle",
    "axis_angle_to_quaternion",
    # Look-at
    "create_look_at",
    # Metrics
    "geodesic_distance",
    "quaternion_angular_distance",
]

__version__ = "0.1.0"
