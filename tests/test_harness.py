"""Tests for the staged verification run."""

import pytest


ALL_STAGES = (
    "models",
    "detection",
    "landmarks",
    "descriptors",
    "labeled_descriptors",
    "matcher",
    "expressions",
)


@pytest.fixture
def make_check(make_nets, tmp_path):
    def _make(**kwargs):
        from face_essentials.harness import EssentialsCheck

        nets_kwargs = {
            key: kwargs.pop(key)
            for key in ("boxes", "fail", "detector_raises", "expression_raises")
            if key in kwargs
        }
        return EssentialsCheck(nets=make_nets(**nets_kwargs), model_path=tmp_path, **kwargs)
    return _make


class TestEssentialsCheck:
    """Test cases for EssentialsCheck."""

    def test_all_stages_pass(self, make_check, one_face, capsys):
        """Test a detected face passes every stage."""
        from face_essentials.harness import StageStatus

        check = make_check(boxes=one_face)

        assert check.run() == 0
        assert {stage: check.stages[stage] for stage in ALL_STAGES} == {
            stage: StageStatus.PASSED for stage in ALL_STAGES
        }
        assert check.failed_stages == []

        out = capsys.readouterr().out
        assert "Face Essentials Functionality Test" in out
        assert "✅ All models loaded successfully!" in out
        assert "✅ Detected 1 face(s)" in out
        assert "Total: 68 landmark points" in out
        assert "Descriptor length: 128 dimensions" in out
        assert 'LabeledFaceDescriptors created for: "testUser"' in out
        assert "FaceMatcher test: testUser (distance: 0.0000)" in out
        assert "Top 3 expressions:" in out
        assert "Test Summary" in out
        assert "✅ FaceMatcher: WORKING" in out
        assert "🎉 All essential functionality verified!" in out

    def test_model_load_failure(self, make_check, one_face, capsys):
        """Test a load failure exits non-zero before any inference."""
        check = make_check(boxes=one_face, fail=("face_recognition",))

        assert check.run() == 1
        assert "detection" not in check.stages

        out = capsys.readouterr().out
        assert "❌ Error loading models" in out
        assert "corrupt face_recognition model" in out
        assert "Tests aborted: Models failed to load" in out
        assert "Test Summary" not in out

    def test_missing_model_directory(self, tmp_path, capsys):
        """Test the real bundle fails on an empty model directory."""
        from face_essentials.harness import EssentialsCheck

        check = EssentialsCheck(model_path=tmp_path / "model")

        assert check.run() == 1
        out = capsys.readouterr().out
        assert out.count("❌ Error loading models") == 4
        assert "model file not found" in out

    def test_no_faces(self, make_check, capsys):
        """Test zero detections still reaches the summary."""
        from face_essentials.harness import StageStatus

        check = make_check(boxes=[])

        assert check.run() == 0
        assert check.stages["detection"] is StageStatus.SKIPPED
        assert check.stages["matcher"] is StageStatus.SKIPPED
        assert check.failed_stages == []

        out = capsys.readouterr().out
        assert "⚠️  No faces detected" in out
        assert "No detections to test landmarks" in out
        assert "Test Summary" in out
        assert "⚠️  Face detection: SKIPPED" in out
        assert "Simple test image may not contain detectable faces" in out

    def test_detection_error_is_isolated(self, make_check, one_face, capsys):
        """Test a detection exception is reported and the run continues."""
        from face_essentials.harness import StageStatus

        check = make_check(boxes=one_face, detector_raises=True)

        assert check.run() == 0
        assert check.stages["detection"] is StageStatus.FAILED
        assert check.stages["landmarks"] is StageStatus.SKIPPED
        assert check.failed_stages == ["detection"]

        out = capsys.readouterr().out
        assert "❌ Detection failed: detector exploded" in out
        assert "❌ Face detection: FAILED" in out
        assert "Completed with 1 failed check(s): detection" in out

    def test_descriptor_failure_is_isolated(self, make_check, one_face, capsys):
        """Test a broken descriptor fails its stages only."""
        from face_essentials.harness import StageStatus

        check = make_check(boxes=one_face)
        check.load_models()
        detections = check.test_detection(check.create_input())
        detections[0].descriptor = None

        check.test_face_descriptors(detections)
        check.test_expressions(detections)

        assert check.stages["descriptors"] is StageStatus.FAILED
        assert check.stages["labeled_descriptors"] is StageStatus.FAILED
        assert check.stages["matcher"] is StageStatus.FAILED
        assert check.stages["expressions"] is StageStatus.PASSED
        assert "❌ Face descriptors test failed" in capsys.readouterr().out

    def test_summary_lists_models(self, make_check, one_face, capsys):
        """Test every model is listed as available."""
        check = make_check(boxes=one_face)
        check.run()

        out = capsys.readouterr().out
        for name in ("FaceDetectorNet", "FaceLandmark68Net", "FaceRecognitionNet",
                     "FaceExpressionNet"):
            assert f"✅ {name}: AVAILABLE" in out

    def test_runs_are_repeatable(self, make_check, one_face):
        """Test two runs classify every stage identically."""
        first = make_check(boxes=one_face)
        second = make_check(boxes=one_face)

        first.run()
        second.run()

        assert first.stages == second.stages

    def test_detection_boxes_are_valid(self, make_check, capsys):
        """Test reported boxes are non-negative integers with scores in [0, 1]."""
        check = make_check(boxes=[(-20, -10, 100, 120, 0.75)])
        check.load_models()

        detections = check.test_detection(check.create_input())

        assert len(detections) == 1
        for detection in detections:
            box = detection.box.to_dict()
            assert all(isinstance(v, int) and v >= 0 for v in box.values())
            assert 0.0 <= detection.score <= 1.0

    def test_save_fixture_and_output(self, make_check, one_face, tmp_path):
        """Test the fixture and annotated image are written."""
        fixture_path = tmp_path / "out" / "fixture.png"
        output_path = tmp_path / "out" / "annotated.png"

        check = make_check(boxes=one_face, save_fixture=fixture_path, output_path=output_path)

        assert check.run() == 0
        assert fixture_path.exists()
        assert output_path.exists()

    def test_real_image(self, make_check, one_face, tmp_path, capsys):
        """Test --image input replaces the synthetic fixture."""
        import numpy as np
        from face_essentials.fixture import save_image

        image_path = save_image(np.full((240, 320, 3), 90, dtype=np.uint8), tmp_path / "photo.png")
        check = make_check(boxes=one_face, image_path=image_path)

        image = check.create_input()

        assert image.shape == (240, 320, 3)
        assert "Loading test image" in capsys.readouterr().out

    def test_save_fixture_ignored_with_image(self, make_check, one_face, tmp_path, capsys):
        """Test --save-fixture alongside --image warns and writes nothing."""
        import numpy as np
        from face_essentials.fixture import save_image

        image_path = save_image(np.zeros((100, 100, 3), dtype=np.uint8), tmp_path / "photo.png")
        fixture_path = tmp_path / "fixture.png"
        check = make_check(boxes=one_face, image_path=image_path, save_fixture=fixture_path)

        check.create_input()

        assert "Ignoring --save-fixture" in capsys.readouterr().out
        assert not fixture_path.exists()
