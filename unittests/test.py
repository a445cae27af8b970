#! /usr/bin/env python
"""Runs unit tests on all csdl2openapi modules"""

import unittest
import logging

import test_diagram
import test_document
import test_model
import test_names
import test_paths
import test_schemas
import test_strings
import test_vocab


all_tests = unittest.TestSuite()
all_tests.addTest(test_diagram.suite())
all_tests.addTest(test_document.suite())
all_tests.addTest(test_model.suite())
all_tests.addTest(test_names.suite())
all_tests.addTest(test_paths.suite())
all_tests.addTest(test_schemas.suite())
all_tests.addTest(test_strings.suite())
all_tests.addTest(test_vocab.suite())


def suite():
    global all_tests
    return all_tests


def load_tests(loader, tests, pattern):
    return suite()


if __name__ == "__main__":
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
