import argparse
import contextlib
import io
import json
import pathlib
import sys
import tomllib
import unittest
from unittest import mock

import random_id_maker


def run_main(argv: list[str]) -> tuple[int, str, str]:
    """Runs `main()`, returning (exit status, stdout, stderr)."""
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        status = random_id_maker.main(argv)
    return status, out.getvalue(), err.getvalue()


class TestMain(unittest.TestCase):
    def test_default(self):
        status, out, _ = run_main([])
        self.assertEqual(status, 0)
        self.assertRegex(out.strip(), r'^[a-zA-Z0-9]{7}$')

    def test_length_and_count(self):
        status, out, _ = run_main(['--length', '12', '--count', '3'])
        self.assertEqual(status, 0)
        lines = out.splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(all(len(line) == 12 for line in lines))

    def test_info(self):
        status, out, _ = run_main(['-l', '8', '--info'])
        self.assertEqual(status, 0)
        result = json.loads(out)
        self.assertEqual(len(result['id']), 8)
        self.assertEqual(result['safety'], 'safe')
        self.assertEqual(result['collision_probability'], '0.002%')
        self.assertIn('combinations', result['recommendation'])

    def test_table(self):
        status, out, _ = run_main(['--table'])
        self.assertEqual(status, 0)
        rows = [json.loads(line) for line in out.splitlines()]
        self.assertEqual(len(rows), 26)
        self.assertEqual(rows[0]['length'], 7)
        self.assertEqual(rows[-1]['length'], 32)

    def test_invalid_length(self):
        status, out, err = run_main(['--length', '6'])
        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertIn('ID length must be at least 7 characters', err)

    def test_length_over_max(self):
        status, _, err = run_main(['--length', '33'])
        self.assertEqual(status, 1)
        self.assertIn('ID length cannot exceed 32 characters', err)

    def test_crypto_failure(self):
        with mock.patch.dict(sys.modules, {'js': None}):
            with mock.patch('secure_random.secrets.token_bytes', side_effect=OSError('boom')):
                status, out, err = run_main(['--info'])
        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertEqual(err, 'error: Failed to generate random bytes: boom\n')

    def test_bad_count_is_a_usage_error(self):
        with self.assertRaises(SystemExit) as ctx:
            run_main(['--count', '0'])
        self.assertEqual(ctx.exception.code, 2)


class TestPositiveInt(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(random_id_maker.positive_int('5'), 5)

    def test_invalid(self):
        for value in ('0', '-2', 'abc', '1.5'):
            with self.subTest(value=value):
                with self.assertRaises(argparse.ArgumentTypeError):
                    random_id_maker.positive_int(value)


class TestPackaging(unittest.TestCase):
    def test_python_requirement_matches_script_header(self):
        here = pathlib.Path(__file__).parent
        with open(here / 'pyproject.toml', 'rb') as f:
            declared: str = tomllib.load(f)['project']['requires-python']
        header: str = (here / 'random_id_maker.py').read_text()
        self.assertIn(f'# requires-python = "{declared}"', header)


if __name__ == '__main__':
    unittest.main()
