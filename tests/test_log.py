import logging
import unittest

from assetpack.log import setup_logging


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging(level=logging.WARNING)

    def test_verbose_and_explicit_level(self):
        setup_logging(verbose=True)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

        setup_logging()
        self.assertEqual(logging.getLogger().level, logging.INFO)

        setup_logging(verbose=True, level=logging.ERROR)
        self.assertEqual(logging.getLogger().level, logging.ERROR)

    def test_repeated_calls_keep_one_handler(self):
        setup_logging()
        setup_logging()
        self.assertEqual(len(logging.getLogger().handlers), 1)


if __name__ == "__main__":
    unittest.main()
