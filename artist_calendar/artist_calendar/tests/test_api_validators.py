"""
Tests for api/shared/validators.py and api/shared/security.py

Tests request string validation and client IP resolution.
"""

import unittest
from unittest.mock import MagicMock, patch

import frappe

from artist_calendar.api.shared import security, validators


def _throw(msg, exc=frappe.ValidationError, *args, **kwargs):
	raise exc(msg)


class TestValidators(unittest.TestCase):
	"""Tests for request validators."""

	def setUp(self):
		# Sin sitio: frappe.throw y _ se reemplazan
		for target, replacement in (
			("frappe.throw", _throw),
			("artist_calendar.api.shared.validators._", lambda msg: msg),
		):
			patcher = patch(target, side_effect=replacement)
			patcher.start()
			self.addCleanup(patcher.stop)

	def test_date_string(self):
		self.assertEqual(validators.validate_date_string(" 2026-03-02 "), "2026-03-02")
		with self.assertRaises(frappe.ValidationError):
			validators.validate_date_string("02/03/2026")
		with self.assertRaises(frappe.ValidationError):
			validators.validate_date_string("")

	def test_time_string(self):
		self.assertEqual(validators.validate_time_string("09:30"), "09:30")
		for value in ("9:30", "24:00", "12:60", "noon"):
			with self.assertRaises(frappe.ValidationError):
				validators.validate_time_string(value)

	def test_date_list_from_json(self):
		self.assertEqual(
			validators.validate_date_list('["2026-03-02", "2026-03-03"]'),
			["2026-03-02", "2026-03-03"]
		)
		self.assertEqual(validators.validate_date_list(None), [])

	def test_date_list_rejects_non_list(self):
		with self.assertRaises(frappe.ValidationError):
			validators.validate_date_list({"date": "2026-03-02"})

	def test_positive_int(self):
		self.assertEqual(validators.validate_positive_int("90", "session_length"), 90)
		for value in ("0", "-5", "abc", None, 2000):
			with self.assertRaises(frappe.ValidationError):
				validators.validate_positive_int(value, "session_length")

	def test_docname(self):
		self.assertEqual(validators.validate_docname(" ART-0001 "), "ART-0001")
		for value in ("", "x" * 141, "a; DROP TABLE", "<script>"):
			with self.assertRaises(frappe.ValidationError):
				validators.validate_docname(value)


class TestClientIp(unittest.TestCase):
	"""Tests for get_client_ip."""

	def _request(self, headers, remote_addr="10.0.0.9"):
		request = MagicMock()
		request.headers = headers
		request.remote_addr = remote_addr
		return request

	def test_forwarded_for_first_ip(self):
		request = self._request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
		with patch.object(security.frappe, "local", MagicMock(request=request)):
			self.assertEqual(security.get_client_ip(), "203.0.113.7")

	def test_remote_addr_fallback(self):
		request = self._request({})
		with patch.object(security.frappe, "local", MagicMock(request=request)):
			self.assertEqual(security.get_client_ip(), "10.0.0.9")


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
