"""Tests for image decoding."""

import struct

import cv2
import numpy as np
import pytest

from blackhole.errors import DecodeError
from blackhole.imaging.image_decoder import decode_image_bytes, decode_image_file


def _png_bytes(rgb):
    ok, buffer = cv2.imencode(".png", cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


def _with_exif_orientation(jpeg, orientation):
    """Insert an APP1 EXIF segment carrying only an Orientation tag."""
    tiff = (
        b"MM\x00\x2a\x00\x00\x00\x08"                       # big-endian TIFF header, IFD at 8
        + struct.pack(">H", 1)                              # one entry
        + struct.pack(">HHIHH", 0x0112, 3, 1, orientation, 0)
        + struct.pack(">I", 0)                              # no next IFD
    )
    payload = b"Exif\x00\x00" + tiff
    segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
    
    # Keep the JFIF APP0 segment first if the encoder wrote one
    offset = 2
    if jpeg[2:4] == b"\xff\xe0":
        offset = 4 + struct.unpack(">H", jpeg[4:6])[0]
    return jpeg[:offset] + segment + jpeg[offset:]


class TestDecodeImageBytes:
    """Decoding encoded bytes to RGB arrays."""
    
    def test_decodes_to_rgb(self):
        """Channels come back in RGB order."""
        image = np.zeros((4, 6, 3), dtype=np.uint8)
        image[..., 0] = 255  # pure red
        
        decoded = decode_image_bytes(_png_bytes(image))
        
        assert decoded.shape == (4, 6, 3)
        assert decoded.dtype == np.uint8
        assert np.array_equal(decoded, image)
    
    def test_grayscale_expanded_to_rgb(self):
        """Single-channel images gain three identical channels."""
        gray = np.arange(12, dtype=np.uint8).reshape(3, 4)
        ok, buffer = cv2.imencode(".png", gray)
        assert ok
        
        decoded = decode_image_bytes(buffer.tobytes())
        
        assert decoded.shape == (3, 4, 3)
        assert np.array_equal(decoded[..., 0], gray)
        assert np.array_equal(decoded[..., 2], gray)
    
    def test_exif_orientation_is_ignored(self):
        """A rotated-orientation JPEG keeps its stored pixel grid."""
        image = np.zeros((8, 16, 3), dtype=np.uint8)
        image[:, :8] = 255  # bright left half
        ok, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, 100])
        assert ok
        jpeg = _with_exif_orientation(buffer.tobytes(), orientation=6)
        
        decoded = decode_image_bytes(jpeg)
        
        assert decoded.shape == (8, 16, 3)
        assert decoded[:, :8].mean() > decoded[:, 8:].mean()
    
    def test_empty_input(self):
        """Empty input is a DecodeError."""
        with pytest.raises(DecodeError):
            decode_image_bytes(b"")
    
    def test_garbage_input(self):
        """Bytes that are not an image are a DecodeError."""
        with pytest.raises(DecodeError):
            decode_image_bytes(b"definitely not an image", name="junk.jpg")


class TestDecodeImageFile:
    """Decoding from the filesystem."""
    
    def test_missing_file(self, tmp_path):
        """A missing file is a DecodeError, not an OSError."""
        with pytest.raises(DecodeError):
            decode_image_file(tmp_path / "absent.jpg")
    
    def test_decode_file(self, tmp_path, random_image):
        """Files decode exactly like their bytes."""
        path = tmp_path / "x.png"
        path.write_bytes(_png_bytes(random_image))
        assert np.array_equal(decode_image_file(path), random_image)
