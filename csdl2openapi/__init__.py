#! /usr/bin/env python

from .document import csdl2openapi     # noqa
