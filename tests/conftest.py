import pytest

from mathtile.errors.exceptions import RasterizationError
from mathtile.types import RasterImage


def gradient_pixels(width: int, height: int) -> bytes:
    """RGBA buffer where every pixel differs from its neighbours."""
    out = bytearray()
    for y in range(height):
        for x in range(width):
            out += bytes([x % 256, y % 256, (x * 7 + y * 13) % 256, 255])
    return bytes(out)


class StubRasterizer:
    """Rasterizer double: fails at chosen densities, otherwise returns a fixed image."""

    def __init__(
        self,
        width: int = 8,
        height: int = 4,
        fail_densities: set[float] | None = None,
        always_fail: bool = False,
    ) -> None:
        self.width = width
        self.height = height
        self.fail_densities = fail_densities or set()
        self.always_fail = always_fail
        self.calls: list[tuple[str, float, float]] = []

    def rasterize(self, markup: str, font_size: float, pixel_density: float) -> RasterImage:
        self.calls.append((markup, font_size, pixel_density))
        if self.always_fail or pixel_density in self.fail_densities:
            raise RasterizationError(
                f"boom at density {pixel_density}",
                error_type="resource_exhausted",
                pixel_density=pixel_density,
            )
        return RasterImage(
            pixels=gradient_pixels(self.width, self.height),
            width=self.width,
            height=self.height,
        )

    @property
    def densities(self) -> list[float]:
        return [call[2] for call in self.calls]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def stub_rasterizer():
    return StubRasterizer()


@pytest.fixture
def make_rasterizer():
    return StubRasterizer


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recorded_sleeps():
    """An asyncio.sleep replacement that records waits instead of sleeping."""
    waits: list[float] = []

    async def _sleep(seconds: float) -> None:
        waits.append(seconds)

    _sleep.waits = waits  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Keep user/project config files and MATHTILE_* env vars out of tests."""
    import os

    from mathtile.config import hierarchy

    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    for key in list(os.environ):
        if key.startswith("MATHTILE_") or key == "PORT":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_pixels():
    return gradient_pixels
