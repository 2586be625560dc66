import unittest

from memsig.errors import LengthMismatch, MalformedToken, UnresolvableWildcard
from memsig.parser import HybridParser, hybrid_to_wildcard, masked_to_wildcard


class TestMaskedToWildcard(unittest.TestCase):
    def test_text_mask(self):
        pattern, wildcard = masked_to_wildcard([0x11, 0x12, 0x13, 0x14], "x?xx")
        self.assertEqual(wildcard, 0x00)
        self.assertEqual(pattern, bytes([0x11, 0x00, 0x13, 0x14]))

    def test_byte_mask(self):
        pattern, wildcard = masked_to_wildcard([0x11, 0x12, 0x13, 0x14], [1, 0, 1, 1])
        self.assertEqual((pattern, wildcard), (bytes([0x11, 0x00, 0x13, 0x14]), 0))

    def test_custom_unknown(self):
        pattern, _ = masked_to_wildcard(b"\x11\x12\x13\x14", "x.xx", ".")
        self.assertEqual(pattern, bytes([0x11, 0x00, 0x13, 0x14]))

        pattern, _ = masked_to_wildcard(b"\x11\x12\x13\x14", [7, 9, 7, 7], 9)
        self.assertEqual(pattern, bytes([0x11, 0x00, 0x13, 0x14]))

    def test_unknown_type_follows_mask(self):
        # int unknown against a text mask and the other way around
        expected = bytes([0x11, 0x00, 0x13, 0x14])
        self.assertEqual(
            masked_to_wildcard(b"\x11\x12\x13\x14", "x?xx", ord("?"))[0], expected
        )
        self.assertEqual(
            masked_to_wildcard(b"\x11\x12\x13\x14", b"x?xx", "?")[0], expected
        )

    def test_wildcard_avoids_literals(self):
        pattern, wildcard = masked_to_wildcard([0x00, 0xAA, 0x01], "xx?")
        self.assertEqual(wildcard, 0x01)
        self.assertEqual(pattern, bytes([0x00, 0xAA, 0x01]))

    def test_length_mismatch(self):
        with self.assertRaises(LengthMismatch):
            masked_to_wildcard([0x01, 0x02, 0x03, 0x04], [1, 1, 1])
        with self.assertRaises(ValueError):
            masked_to_wildcard([0x01, 0x02], "x?x")

    def test_all_byte_values_literal(self):
        with self.assertRaises(UnresolvableWildcard):
            masked_to_wildcard(bytes(range(256)), "x" * 256)

    def test_empty(self):
        self.assertEqual(masked_to_wildcard(b"", ""), (b"", 0))


class TestHybridToWildcard(unittest.TestCase):
    def test_ida_pattern(self):
        pattern, wildcard = hybrid_to_wildcard("01 ?? 13 14")
        self.assertEqual(wildcard, 0x00)
        self.assertEqual(pattern, bytes([0x01, 0x00, 0x13, 0x14]))

    def test_single_digit_and_single_question_mark(self):
        self.assertEqual(
            hybrid_to_wildcard("1 ? 13 14"), hybrid_to_wildcard("01 ?? 13 14")
        )

    def test_question_mark_runs_collapse(self):
        # one wildcard per token, not per '?'
        pattern, wildcard = hybrid_to_wildcard("? ?? ???")
        self.assertEqual(len(pattern), 3)
        self.assertEqual(pattern, bytes([wildcard] * 3))

    def test_whitespace(self):
        pattern, _ = hybrid_to_wildcard("  01   02\t03\n")
        self.assertEqual(pattern, bytes([0x01, 0x02, 0x03]))

    def test_unicode_whitespace_separates(self):
        pattern, _ = hybrid_to_wildcard("01\u300002\x1c??")
        self.assertEqual(len(pattern), 3)
        self.assertEqual(pattern[:2], bytes([0x01, 0x02]))

    def test_trailing_token_without_space(self):
        self.assertEqual(hybrid_to_wildcard("AA BB")[0], bytes([0xAA, 0xBB]))
        self.assertEqual(hybrid_to_wildcard("AA ??")[0], bytes([0xAA, 0x00]))

    def test_case_insensitive(self):
        self.assertEqual(hybrid_to_wildcard("aB")[0], hybrid_to_wildcard("Ab")[0])

    def test_leading_zeros(self):
        self.assertEqual(hybrid_to_wildcard("0001 ff")[0], bytes([0x01, 0xFF]))

    def test_bytes_input(self):
        self.assertEqual(
            hybrid_to_wildcard(b"01 ?? 13"), hybrid_to_wildcard("01 ?? 13")
        )

    def test_literal_zero_with_wildcard(self):
        # the wildcard must not be 0x00 when 00 is a literal
        pattern, wildcard = hybrid_to_wildcard("00 ?? 01")
        self.assertEqual(wildcard, 0x02)
        self.assertEqual(pattern, bytes([0x00, 0x02, 0x01]))

    def test_empty(self):
        self.assertEqual(hybrid_to_wildcard(""), (b"", 0))
        self.assertEqual(hybrid_to_wildcard("   "), (b"", 0))

    def test_every_byte_value_literal(self):
        text = " ".join(f"{i:02X}" for i in range(256))
        with self.assertRaises(UnresolvableWildcard):
            hybrid_to_wildcard(text)


class TestMalformedTokens(unittest.TestCase):
    def assertMalformed(self, text, token, index):
        with self.assertRaises(MalformedToken) as ctx:
            hybrid_to_wildcard(text)
        self.assertEqual(ctx.exception.token, token, f"token mismatch for: {text!r}")
        self.assertEqual(ctx.exception.index, index, f"index mismatch for: {text!r}")

    def test_non_hex(self):
        self.assertMalformed("01 GG 13", "GG", 3)

    def test_hex_prefix(self):
        self.assertMalformed("0x1F", "0x1F", 0)

    def test_mixed_tokens(self):
        self.assertMalformed("AA 1?", "1?", 3)
        self.assertMalformed("?1", "?1", 0)

    def test_value_too_large(self):
        self.assertMalformed("100", "100", 0)

    def test_non_ascii(self):
        self.assertMalformed(b"01 \xff", b"\xff", 3)

    def test_is_value_error(self):
        with self.assertRaises(ValueError):
            hybrid_to_wildcard("zz")


class TestHybridParser(unittest.TestCase):
    def test_tokens(self):
        parser = HybridParser("48 8B ? 05")
        parser.parse()
        self.assertEqual(parser.tokens, [0x48, 0x8B, None, 0x05])


if __name__ == "__main__":
    unittest.main()
