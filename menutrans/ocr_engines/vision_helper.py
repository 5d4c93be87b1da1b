"""Apple Vision framework OCR helper.

Run as ``python -m menutrans.ocr_engines.vision_helper <image>``. Prints the
recognized lines joined by newlines and exits 0; exits 1 with a message on
stderr when the image cannot be read or recognition fails.
"""
import signal
import sys

import Vision
from Foundation import NSURL

from menutrans import config


def _on_timeout(signum, frame):
    sys.stderr.write("Error: Text recognition timed out\n")
    sys.exit(1)


def recognize_lines(image_path, languages=None):
    request = Vision.VNRecognizeTextRequest.alloc().init()
    request.setRecognitionLanguages_(languages or config.OCR_RECOGNITION_LANGUAGES)
    request.setRecognitionLevel_(Vision.VNRequestTextRecognitionLevelAccurate)
    if hasattr(request, 'setUsesLanguageCorrection_'):
        request.setUsesLanguageCorrection_(True)

    url = NSURL.fileURLWithPath_(image_path)
    handler = Vision.VNImageRequestHandler.alloc().initWithURL_options_(url, {})
    success, error = handler.performRequests_error_([request], None)
    if not success:
        raise RuntimeError(f"Vision request failed: {error}")

    lines = []
    for observation in request.results() or []:
        candidates = observation.topCandidates_(1)
        if candidates:
            lines.append(candidates[0].string())
    return lines


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        sys.stderr.write("Usage: vision_helper <image>\n")
        return 1

    signal.signal(signal.SIGALRM, _on_timeout)
    signal.alarm(config.OCR_HELPER_TIMEOUT_SECONDS)
    try:
        lines = recognize_lines(argv[0])
    except Exception as e:
        sys.stderr.write(f"Error: Could not recognize image: {e}\n")
        return 1
    finally:
        signal.alarm(0)

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == '__main__':
    sys.exit(main())
