from unittest.mock import MagicMock, patch
import io
import json
import numpy as np
from PIL import Image
import pytest
import requests
from inkmix.src.mixing_engine.io import image_to_pixels, read_image_rgb, write_result_json

def test_read_image_rgb_url_success():
    # Create a dummy image
    img = Image.new('RGB', (10, 10), color='red')
    img_byte_arr = io.BytesIO()
    img.save(img_byte_arr, format='PNG')
    img_bytes = img_byte_arr.getvalue()

    with patch('requests.get') as mock_get:
        mock_response = MagicMock()
        mock_response.content = img_bytes
        mock_response.raise_for_status.return_value = None
        mock_get.return_value = mock_response

        url = "http://example.com/image.png"
        result = read_image_rgb(url)

        mock_get.assert_called_once_with(url, timeout=10)
        assert isinstance(result, np.ndarray)
        assert result.shape == (10, 10, 3)
        assert np.all(result[0, 0] == [255, 0, 0])

def test_read_image_rgb_url_failure():
    with patch('requests.get') as mock_get:
        # 404 from the server
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Client Error")
        mock_get.return_value = mock_response

        url = "http://example.com/nonexistent.png"
        with pytest.raises(requests.exceptions.HTTPError):
            read_image_rgb(url)

def test_read_image_rgb_local_file(tmp_path):
    img = Image.new('RGBA', (10, 10), color=(0, 0, 255, 128))
    img_path = tmp_path / "test_image.png"
    img.save(img_path)

    result = read_image_rgb(str(img_path))

    assert result.shape == (10, 10, 3)
    assert np.all(result[0, 0] == [0, 0, 255])

def test_image_to_pixels_downsizes_keeping_aspect():
    image = np.zeros((300, 600, 3), dtype=np.uint8)
    image[:, :] = [30, 120, 210]

    pixels = image_to_pixels(image, max_side=150)

    assert pixels.shape == (150 * 75, 3)
    assert np.all(pixels == [30, 120, 210])

def test_image_to_pixels_keeps_small_images():
    image = np.full((20, 10, 3), 7, dtype=np.uint8)

    pixels = image_to_pixels(image)

    assert pixels.shape == (200, 3)

def test_image_to_pixels_rejects_grayscale():
    with pytest.raises(ValueError):
        image_to_pixels(np.zeros((10, 10), dtype=np.uint8))

def test_write_result_json(tmp_path):
    out = tmp_path / "nested" / "result.json"

    write_result_json({"colors": ["#FF0000"]}, out)

    assert json.loads(out.read_text(encoding="utf-8")) == {"colors": ["#FF0000"]}
