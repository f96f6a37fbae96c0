import sys
import unittest


def run_tests():
    try:
        from areamoments import tests
        from areamoments.t import test_session
    except ImportError:
        print("Error: Could not find the tests module.")
        print("Make sure 'areamoments' is installed or run the command in "
              "the project's root directory.")
        sys.exit(1)

    loader = unittest.TestLoader()
    suite = unittest.TestSuite([
        loader.loadTestsFromModule(tests),
        loader.loadTestsFromModule(test_session),
    ])

    # verbosity=0 only prints the summary
    runner = unittest.TextTestRunner(verbosity=0)
    result = runner.run(suite)

    sys.exit(not result.wasSuccessful())


if __name__ == '__main__':
    if len(sys.argv) > 1 and sys.argv[1] == 'test':
        run_tests()
    else:
        print("Unknown command.")
        print("Usage: python -m areamoments test")
