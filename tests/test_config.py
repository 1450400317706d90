# -*- coding: utf-8 -*-
"""
test_config
----------------------------------

Tests for the output options and the service config file.
"""
import os
import shutil
import tempfile
import unittest

from ripline import errors
from ripline.config import OutputOptions, ServiceCfg, CLIENT_OUTPUT_OPTIONS, SERVER_OUTPUT_OPTIONS


class OutputOptionsTest(unittest.TestCase):
    def test_defaults(self):
        self.assertEqual('xmlrpc', OutputOptions(CLIENT_OUTPUT_OPTIONS)['version'])
        self.assertEqual('auto', OutputOptions(SERVER_OUTPUT_OPTIONS)['version'])

    def test_overrides_do_not_touch_defaults(self):
        opts = OutputOptions(CLIENT_OUTPUT_OPTIONS, dict(version='soap 1.1'))
        self.assertEqual('soap 1.1', opts['version'])
        self.assertEqual('xmlrpc', CLIENT_OUTPUT_OPTIONS['version'])

    def test_set_option(self):
        opts = OutputOptions(CLIENT_OUTPUT_OPTIONS)
        self.assertTrue(opts.set_option('verbosity', 'newlines_only'))
        self.assertEqual('newlines_only', opts['verbosity'])
        self.assertFalse(opts.set_option('colour', 'blue'))
        self.assertNotIn('colour', opts)

    def test_escaping(self):
        opts = OutputOptions(CLIENT_OUTPUT_OPTIONS, dict(escaping='non-ascii'))
        self.assertEqual(['non-ascii'], opts['escaping'])
        self.assertTrue(opts.set_option('escaping', ('markup', 'non-ascii')))
        self.assertEqual(['markup', 'non-ascii'], opts['escaping'])

    def test_unsupported_values(self):
        opts = OutputOptions(CLIENT_OUTPUT_OPTIONS)
        with self.assertRaises(errors.ConfigurationError):
            opts.set_option('escaping', ['markup', 'cdata'])
        self.assertEqual(['markup'], opts['escaping'])
        with self.assertRaises(errors.ConfigurationError):
            opts.set_option('output_type', 'json')
        with self.assertRaises(errors.ConfigurationError):
            OutputOptions(SERVER_OUTPUT_OPTIONS, dict(escaping=['non-print']))


class ServiceCfgTest(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def write_cfg(self, text):
        fname = os.path.join(self.tmp_dir, 'ripline.yaml')
        with open(fname, 'w') as f:
            f.write(text)
        return fname

    def test_load(self):
        cfg = ServiceCfg(self.write_cfg("""
name: Film Service
port: 9000
version: soap 1.1
timeout: 2.5
services:
  film: films:Film
  util: string
"""))
        self.assertEqual('Film Service', cfg.name)
        self.assertEqual('localhost', cfg.host)
        self.assertEqual(9000, cfg.port)
        self.assertEqual('http://localhost:9000/', cfg.url)
        self.assertEqual({'film': 'films:Film', 'util': 'string'}, cfg.services)
        self.assertEqual({'version': 'soap 1.1'}, cfg.options)
        self.assertEqual(2.5, cfg.timeout)
        self.assertTrue(cfg.documentation)

    def test_empty_file(self):
        cfg = ServiceCfg(self.write_cfg(""))
        self.assertEqual(8000, cfg.port)
        self.assertEqual({}, cfg.services)

    def test_invalid_namespace(self):
        with self.assertRaises(AssertionError):
            ServiceCfg(self.write_cfg("services:\n  bad-name: string\n"))

    def test_missing_file(self):
        with self.assertRaises(AssertionError):
            ServiceCfg(os.path.join(self.tmp_dir, 'missing.yaml'))


if __name__ == '__main__':
    unittest.main()
