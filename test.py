from rigid_orient import (
    Axis,
    convert_euler_degrees_to_quaternion,
    convert_quaternion_to_euler_degrees,
    convert_euler_degrees_to_transform,
    convert_euler_degrees_to_transform_precise,
    convert_transform_to_euler_degrees,
    convert_quaternion_to_axis_angle,
    create_look_at,
    geodesic_distance,
)
import numpy as np

if __name__ == "__main__":
    # =========================================================================
    # 1. Euler <-> quaternion
    # =========================================================================
    euler = np.array([90.0, 0.0, 0.0])
    quat = convert_euler_degrees_to_quaternion(euler)
    print(f"Quaternion for {euler}: {quat}")
    print(f"Back to euler: {convert_quaternion_to_euler_degrees(quat)}")

    # gimbal lock: x is pinned to 0, the coupled angle ends up in z
    locked = convert_euler_degrees_to_quaternion(np.array([30.0, 90.0, 20.0]))
    print(f"Gimbal lock decomposition: {convert_quaternion_to_euler_degrees(locked)}")

    # =========================================================================
    # 2. Fast vs precise euler -> transform
    # =========================================================================
    print("\nFast vs precise:")

    batch = np.random.default_rng(0).uniform(-180.0, 180.0, size=(1000, 3))
    fast = convert_euler_degrees_to_transform(batch)
    precise = convert_euler_degrees_to_transform_precise(batch)
    err = geodesic_distance(fast.rotation, precise.rotation, reduce=False, degrees=True)
    print(f"Max disagreement: {err.max():.3e} deg")

    tf = convert_euler_degrees_to_transform(np.array([10.0, 20.0, 30.0]))
    print(f"Transform -> euler: {convert_transform_to_euler_degrees(tf)}")

    # =========================================================================
    # 3. Axis-angle
    # =========================================================================
    print("\nAxis-angle:")

    axis, angle = convert_quaternion_to_axis_angle(quat)
    print(f"axis={axis}, angle={np.rad2deg(angle):.1f} deg")

    axis, angle = convert_quaternion_to_axis_angle(np.array([0.0, 0.0, 0.0, 1.0]))
    print(f"identity: axis={axis}, angle={angle}")

    # =========================================================================
    # 4. Look-at
    # =========================================================================
    print("\nLook-at:")

    for forward in Axis:
        tf = create_look_at(np.zeros(3), np.array([1.0, 2.0, 0.5]), forward_axis=forward)
        print(f"{forward.value}: forward maps to {tf.rotation @ forward.unit_vector}")

    tf = create_look_at(np.ones(3), np.ones(3))
    print(f"from == to: rotation=\n{tf.rotation}")

    print("\nDone!")
