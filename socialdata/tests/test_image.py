import base64
import pytest
from PIL import Image

from socialdata.exceptions import ImageProcessingError, ImageTooLargeError
from socialdata.utils.image import encode_image, generate_avatar_placeholder

@pytest.fixture
def photo_path(tmp_path):
    """Create a test image wider than the embed width"""
    path = tmp_path / "photo.png"
    Image.new("RGBA", (600, 400), (200, 30, 30, 255)).save(path)
    return path

def decode_data_url(data_url):
    return base64.b64decode(data_url.split(",", 1)[1])

@pytest.mark.asyncio
async def test_encode_image_resizes_to_jpeg(photo_path, tmp_path):
    data_url = await encode_image(str(photo_path))

    assert data_url.startswith("data:image/jpeg;base64,")

    output = tmp_path / "out.jpg"
    output.write_bytes(decode_data_url(data_url))
    with Image.open(output) as image:
        assert image.format == "JPEG"
        assert image.size == (300, 200)

@pytest.mark.asyncio
async def test_encode_image_from_file_uri(photo_path):
    data_url = await encode_image(photo_path.as_uri(), max_width=100)

    assert data_url.startswith("data:image/jpeg;base64,")

@pytest.mark.asyncio
async def test_encode_image_too_large(photo_path):
    with pytest.raises(ImageTooLargeError, match="Image too large"):
        await encode_image(str(photo_path), max_length=100)

@pytest.mark.asyncio
async def test_encode_missing_file(tmp_path):
    with pytest.raises(ImageProcessingError, match="Failed to process image"):
        await encode_image(str(tmp_path / "missing.png"))

@pytest.mark.asyncio
async def test_encode_non_image(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("not an image")

    with pytest.raises(ImageProcessingError):
        await encode_image(str(path))

def test_avatar_placeholder_color_and_initials():
    svg = decode_data_url(generate_avatar_placeholder("Bo")).decode()

    # len("Bo") % 6 == 2
    assert 'fill="#ff5722"' in svg
    assert ">BO</text>" in svg

def test_avatar_placeholder_escapes_markup():
    svg = decode_data_url(generate_avatar_placeholder("<b")).decode()

    assert "&lt;B" in svg
