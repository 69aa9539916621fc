"""Backends importable by path from the backend loading tests."""

from ai_router import PythonBackend


class NativeTestBackend(PythonBackend):
    """Python kernels reporting themselves as native."""

    name = "native-test"
    is_native = True


native_instance = NativeTestBackend()


def broken_factory():
    raise RuntimeError("device not found")


not_a_backend = {"name": "dict"}
