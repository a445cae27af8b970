#! /usr/bin/env python
"""The module creates some basic constants to describe the package."""

title_name = "csdl2openapi"
name = "csdl2openapi"
copyright = "\xA92024, the csdl2openapi authors"

major_version = "1.0"
build_date = "20241019"
version = "%s.%s" % (major_version, build_date)

title = (
    "csdl2openapi: "
    "Compiles OData CSDL JSON metadata into OpenAPI 3.0 documents")

#: the literal OpenAPI version of all generated documents
openapi_version = "3.0.2"
