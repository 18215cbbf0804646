import ipaddress
import unittest

import upnpigd as igd
from upnpigd import parsing


def error_code(code, description="Some description"):
    return igd.RequestError(
        igd.RequestErrorKind.ERROR_CODE, code=code, description=description)


class TestErrorTranslation(unittest.TestCase):
    def assertTranslates(self, convert, code, kind):
        exc = convert(error_code(code))
        self.assertIs(exc.kind, kind)
        self.assertIsNone(exc.request_error)

    def assertFallsBack(self, convert, code):
        """
        Codes an operation doesn't know are kept as a generic code/description.
        """
        exc = convert(error_code(code, "Whatever the gateway said"))
        self.assertEqual(exc.kind.name, "REQUEST_ERROR")
        self.assertIs(exc.request_error.kind, igd.RequestErrorKind.ERROR_CODE)
        self.assertEqual(exc.request_error.code, code)
        self.assertEqual(exc.request_error.description, "Whatever the gateway said")

    def test_get_external_ip(self):
        kind = igd.GetExternalIpErrorKind
        convert = parsing.convert_get_external_ip_error
        self.assertTranslates(convert, 401, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 606, kind.ACTION_NOT_AUTHORIZED)
        for code in (501, 714, 715, 716, 717, 724, 725, 728):
            self.assertFallsBack(convert, code)

    def test_add_port(self):
        kind = igd.AddPortErrorKind
        convert = parsing.convert_add_port_error
        self.assertTranslates(convert, 401, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 606, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 716, kind.INTERNAL_PORT_ZERO_INVALID)
        self.assertTranslates(convert, 717, kind.PORT_IN_USE)
        self.assertTranslates(convert, 724, kind.SAME_PORT_VALUES_REQUIRED)
        self.assertTranslates(convert, 725, kind.ONLY_PERMANENT_LEASES_SUPPORTED)
        self.assertTranslates(convert, 728, kind.DESCRIPTION_TOO_LONG)
        for code in (501, 714, 715, 799):
            self.assertFallsBack(convert, code)

    def test_add_any_port(self):
        kind = igd.AddAnyPortErrorKind
        convert = parsing.convert_add_any_port_error
        self.assertTranslates(convert, 401, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 606, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 715, kind.NO_PORTS_AVAILABLE)
        self.assertTranslates(convert, 716, kind.INTERNAL_PORT_ZERO_INVALID)
        self.assertTranslates(convert, 717, kind.EXTERNAL_PORT_IN_USE)
        self.assertTranslates(convert, 724, kind.EXTERNAL_PORT_IN_USE)
        self.assertTranslates(convert, 725, kind.ONLY_PERMANENT_LEASES_SUPPORTED)
        self.assertTranslates(convert, 728, kind.DESCRIPTION_TOO_LONG)
        for code in (501, 714, 799):
            self.assertFallsBack(convert, code)

    def test_kind_independent_of_forum_name(self):
        """
        The description keeps the UPnP Forum name while the kind is the
        operation's own reading of the code.
        """
        wan_desc = igd.errors.WAN_ERR_CODE_DESCRIPTIONS
        for code, name, kind in (
                (715, "WildCardNotPermittedInSrcIP", igd.AddAnyPortErrorKind.NO_PORTS_AVAILABLE),
                (716, "WildCardNotPermittedInExtPort",
                 igd.AddAnyPortErrorKind.INTERNAL_PORT_ZERO_INVALID),
                (728, "NoPortMapsAvailable", igd.AddAnyPortErrorKind.DESCRIPTION_TOO_LONG)):
            self.assertTrue(wan_desc[code].startswith(name))
            self.assertIs(parsing.convert_add_any_port_error(error_code(code)).kind, kind)

    def test_remove_port(self):
        kind = igd.RemovePortErrorKind
        convert = parsing.convert_remove_port_error
        self.assertTranslates(convert, 401, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 606, kind.ACTION_NOT_AUTHORIZED)
        self.assertTranslates(convert, 714, kind.NO_SUCH_PORT_MAPPING)
        for code in (501, 715, 716, 717, 724, 725, 728):
            self.assertFallsBack(convert, code)

    def test_transport_error_wrapped(self):
        """
        Errors other than gateway error codes are wrapped as they are.
        """
        request_error = igd.RequestError(igd.RequestErrorKind.IO_ERROR, "refused")
        for convert in (
                parsing.convert_get_external_ip_error,
                parsing.convert_add_port_error,
                parsing.convert_add_any_port_error,
                parsing.convert_remove_port_error):
            exc = convert(request_error)
            self.assertEqual(exc.kind.name, "REQUEST_ERROR")
            self.assertIs(exc.request_error, request_error)

    def test_external_ip_error_to_add_any_port(self):
        exc = parsing.external_ip_to_add_any_port_error(
            igd.GetExternalIpError(igd.GetExternalIpErrorKind.ACTION_NOT_AUTHORIZED))
        self.assertIs(exc.kind, igd.AddAnyPortErrorKind.ACTION_NOT_AUTHORIZED)

        request_error = error_code(501)
        exc = parsing.external_ip_to_add_any_port_error(
            igd.GetExternalIpError.from_request_error(request_error))
        self.assertIs(exc.kind, igd.AddAnyPortErrorKind.REQUEST_ERROR)
        self.assertIs(exc.request_error, request_error)


class TestResponseDecoding(unittest.TestCase):
    def test_external_ip(self):
        ip = parsing.parse_get_external_ip_response({"NewExternalIPAddress": "203.0.113.7"})
        self.assertEqual(ip, ipaddress.IPv4Address("203.0.113.7"))

    def test_external_ip_missing(self):
        with self.assertRaises(igd.GetExternalIpError) as cm:
            parsing.parse_get_external_ip_response({})
        self.assertIs(cm.exception.kind, igd.GetExternalIpErrorKind.REQUEST_ERROR)
        self.assertIs(
            cm.exception.request_error.kind, igd.RequestErrorKind.INVALID_RESPONSE)

    def test_external_ip_invalid(self):
        with self.assertRaises(igd.GetExternalIpError):
            parsing.parse_get_external_ip_response({"NewExternalIPAddress": "300.1.2.3"})

    def test_any_port_requested(self):
        self.assertEqual(parsing.parse_add_any_port_response({}, 4242), 4242)

    def test_any_port_reserved(self):
        self.assertEqual(
            parsing.parse_add_any_port_response({"NewReservedPort": "50123"}, 4242), 50123)

    def test_any_port_reserved_invalid(self):
        for text in ("abc", "0", "70000"):
            with self.assertRaises(igd.AddAnyPortError) as cm:
                parsing.parse_add_any_port_response({"NewReservedPort": text}, 4242)
            self.assertIs(
                cm.exception.request_error.kind, igd.RequestErrorKind.INVALID_RESPONSE)
