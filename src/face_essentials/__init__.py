"""Face Essentials - verification harness for a four-model face stack.

Checks that a face detector, a 68-point landmark model, a 128D recognition
model and an expression classifier load from a local directory and run on
a test image.

Quick Start:
    # Run the check
    python -m face_essentials --model-path ./model

    # As library
    from face_essentials.nets import Nets
    from face_essentials.pipeline import detect_all_faces
    from face_essentials.matching import FaceMatcher, LabeledFaceDescriptors

    nets = Nets()
    nets.load_from_disk("./model")
    faces = detect_all_faces(image, nets).with_face_descriptors().run()
"""

__version__ = "0.1.0"
