#! /usr/bin/env python
"""Generates an OpenAPI document from an OData CSDL JSON document"""

import json
import logging
import sys
from optparse import OptionParser

from csdl2openapi import csdl2openapi
from csdl2openapi.errors import CompilerError


#: the keyword arguments that may be set in a settings file
SETTINGS = ('url', 'servers', 'odata_version', 'scheme', 'host',
            'base_path', 'diagram', 'max_levels')


def load_settings(path):
    """Loads the settings file

    The format of the settings file is a json dictionary.  The key
    'csdl2openapi' holds a dictionary of default values for the keyword
    arguments of the compiler, the servers setting may be given as a
    list of Server Objects instead of JSON text."""
    with open(path, 'rb') as f:
        settings = json.loads(f.read().decode('utf-8'))
    settings = settings.get('csdl2openapi', {})
    for key in list(settings.keys()):
        if key not in SETTINGS:
            logging.warning("Ignoring unknown setting: %s", key)
            del settings[key]
    if isinstance(settings.get('servers'), list):
        settings['servers'] = json.dumps(settings['servers'])
    return settings


def main(options, args):
    settings = {}
    if options.settings:
        settings = load_settings(options.settings)
    for key in SETTINGS:
        value = getattr(options, key)
        if value is not None:
            settings[key] = value
    with open(args[0], 'rb') as f:
        csdl = json.loads(f.read().decode('utf-8'))
    try:
        openapi = csdl2openapi(csdl, **settings)
    except CompilerError as err:
        return str(err)
    data = json.dumps(openapi, indent=options.indent)
    if len(args) > 1:
        with open(args[1], 'w') as f:
            f.write(data)
    else:
        sys.stdout.write(data + '\n')
    return 0


if __name__ == '__main__':
    parser = OptionParser(usage="usage: %prog [options] csdl [openapi]")
    parser.add_option("--url", dest="url",
                      help="service root URL")
    parser.add_option("--servers", dest="servers",
                      help="JSON array of server objects")
    parser.add_option("--odata-version", dest="odata_version",
                      help="OData version, defaults to 4.01")
    parser.add_option("--scheme", dest="scheme",
                      help="scheme of the service root, defaults to https")
    parser.add_option("--host", dest="host",
                      help="host of the service root, defaults to localhost")
    parser.add_option("--base-path", dest="base_path",
                      help="base path of the service root")
    parser.add_option("-d", "--diagram", action="store_true",
                      dest="diagram", default=None,
                      help="include a yuml diagram in the description")
    parser.add_option("-l", "--max-levels", type="int", dest="max_levels",
                      help="maximum number of navigation segments")
    parser.add_option("-i", "--indent", type="int", dest="indent",
                      default=2, help="indentation of the JSON output")
    parser.add_option("--settings", dest="settings", action="store",
                      default=None, help="Path to the settings file")
    parser.add_option("-v", action="count", dest="logging",
                      default=0, help="increase verbosity of output")
    (options, args) = parser.parse_args()
    if options.logging > 3:
        level = 3
    else:
        level = options.logging
    logging.basicConfig(
        level=[logging.ERROR, logging.WARNING, logging.INFO,
               logging.DEBUG][level])
    if len(args) < 1 or len(args) > 2:
        sys.exit("Usage: openapidoc.py [options] csdl [openapi]")
    sys.exit(main(options, args))
