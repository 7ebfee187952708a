"""
Shared fixtures for Brand Kit Editor tests.

Provides in-memory PNG images, brand elements, configs and sessions.
"""
import sys
import os
from io import BytesIO

import pytest
from PIL import Image

# Run Qt headless unless a platform is explicitly chosen
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

# Ensure editor/src is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'editor', 'src'))

from models.brand_element import BrandElement, ElementType
from models.brand_kit import BrandKitConfig
from models.session import TransformSession
from models.transform import Vec2


# ── Image helpers ───────────────────────────────────────────────────────

def solid_image(size, color=(255, 0, 0, 255)):
    """RGBA image filled with one colour"""
    return Image.new('RGBA', size, color)


def png_bytes(size, color=(255, 0, 0, 255)):
    """Encoded PNG of a solid image"""
    buf = BytesIO()
    solid_image(size, color).save(buf, format='PNG')
    return buf.getvalue()


def make_element(element_id, source, x=400.0, y=300.0, scale=1.0, rotation=0.0,
                 opacity=1.0, element_type=ElementType.LOGO):
    return BrandElement(
        id=element_id,
        type=element_type,
        source_url=source,
        position=Vec2(x, y),
        scale=scale,
        rotation_deg=rotation,
        opacity=opacity,
    )


# ── Fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def overlay_file(tmp_path):
    """100x100 opaque blue PNG on disk"""
    path = tmp_path / "logo.png"
    solid_image((100, 100), (0, 0, 255, 255)).save(path)
    return str(path)


@pytest.fixture
def target_file(tmp_path):
    """1000x1000 white PNG on disk"""
    path = tmp_path / "target.png"
    solid_image((1000, 1000), (255, 255, 255, 255)).save(path)
    return str(path)


@pytest.fixture
def logo(overlay_file):
    return make_element("logo-1", overlay_file)


@pytest.fixture
def session_with_logo(logo):
    """Session holding one 100x100 logo at canvas centre, selected"""
    session = TransformSession(BrandKitConfig([logo]))
    session.set_native_size(logo.id, (100, 100))
    session.select(logo.id)
    return session
