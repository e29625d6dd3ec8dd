"""Tests for the synthetic test image and image helpers."""

import pytest
import numpy as np


class TestCreateTestImage:
    """Test cases for create_test_image."""

    def test_shape(self):
        """Test default size is 200x200 BGR."""
        from face_essentials.fixture import create_test_image

        image = create_test_image()

        assert image.shape == (200, 200, 3)
        assert image.dtype == np.uint8

    def test_deterministic(self):
        """Test two calls draw the same pixels."""
        from face_essentials.fixture import create_test_image

        np.testing.assert_array_equal(create_test_image(), create_test_image())

    def test_colors(self):
        """Test background, face, eye and nose pixels."""
        from face_essentials.fixture import BACKGROUND, SKIN, create_test_image

        image = create_test_image()

        # Corner is background
        assert tuple(image[5, 5]) == BACKGROUND
        # Forehead is skin
        assert tuple(image[60, 100]) == SKIN
        # Eye centres are black
        assert tuple(image[85, 80]) == (0, 0, 0)
        assert tuple(image[85, 120]) == (0, 0, 0)
        # Inside the nose triangle
        assert tuple(image[105, 100]) == (0, 0, 0)

    def test_scaled(self):
        """Test the layout scales with size."""
        from face_essentials.fixture import SKIN, create_test_image

        image = create_test_image(400)

        assert image.shape == (400, 400, 3)
        assert tuple(image[170, 160]) == (0, 0, 0)
        assert tuple(image[120, 200]) == SKIN


class TestHexToBgr:
    """Test cases for hex_to_bgr."""

    def test_convert(self):
        """Test channel order is reversed."""
        from face_essentials.fixture import hex_to_bgr

        assert hex_to_bgr("#ffdbac") == (172, 219, 255)
        assert hex_to_bgr("f0d0b0") == (176, 208, 240)

    def test_invalid(self):
        """Test malformed colors are rejected."""
        from face_essentials.fixture import hex_to_bgr

        with pytest.raises(ValueError):
            hex_to_bgr("#fff")


class TestImageIO:
    """Test cases for load_image and save_image."""

    def test_save_and_load(self, tmp_path):
        """Test a saved PNG loads back unchanged."""
        from face_essentials.fixture import create_test_image, load_image, save_image

        image = create_test_image()
        path = save_image(image, tmp_path / "nested" / "fixture.png")

        assert path.exists()
        np.testing.assert_array_equal(load_image(path), image)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        from face_essentials.fixture import load_image

        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.jpg")

    def test_undecodable_file(self, tmp_path):
        """Test a file OpenCV cannot decode raises ValueError."""
        from face_essentials.fixture import load_image

        path = tmp_path / "garbage.jpg"
        path.write_bytes(b"not an image")

        with pytest.raises(ValueError):
            load_image(path)


class TestDrawDetections:
    """Test cases for draw_detections."""

    def test_draws_on_copy(self):
        """Test the input image is left untouched."""
        from face_essentials.fixture import create_test_image, draw_detections
        from face_essentials.types import (
            Box,
            FaceDescription,
            FaceDetection,
            FaceExpressions,
        )

        image = create_test_image()
        original = image.copy()
        result = FaceDescription(
            detection=FaceDetection(Box(40, 20, 120, 160), 0.9, 200, 200),
            expressions=FaceExpressions({"happy": 0.9, "sad": 0.1}),
        )

        output = draw_detections(image, [result])

        np.testing.assert_array_equal(image, original)
        assert output.shape == image.shape
        assert not np.array_equal(output, image)

    def test_no_results(self):
        """Test an empty result list returns an identical copy."""
        from face_essentials.fixture import create_test_image, draw_detections

        image = create_test_image()
        output = draw_detections(image, [])

        assert output is not image
        np.testing.assert_array_equal(output, image)


class TestEnvironmentIndependence:
    """Test cases for using the image helpers without the inference libraries."""

    def test_does_not_bind_environment(self, tmp_path):
        """Test drawing and image I/O leave the environment unbound."""
        from face_essentials import environment
        from face_essentials.fixture import create_test_image, draw_detections, load_image, save_image

        image = create_test_image()
        path = save_image(draw_detections(image, []), tmp_path / "fixture.png")
        load_image(path)

        assert environment._environment is None
