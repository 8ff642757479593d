"""Components used by the kernel tests."""
