import unittest

from herald import bencoding


class TestBencoding(unittest.TestCase):
    # Examples from BEP 3.
    valid = [
        (b"i3e", 3),
        (b"i-3e", -3),
        (b"i0e", 0),
        (b"le", []),
        (b"l4:spam4:eggse", [b"spam", b"eggs"]),
        (b"d3:cow3:moo4:spam4:eggse", {b"cow": b"moo", b"spam": b"eggs"}),
        (b"d4:spaml1:a1:bee", {b"spam": [b"a", b"b"]}),
    ]

    def test_decode(self):
        for x, y in self.valid:
            with self.subTest(x):
                self.assertEqual(bencoding.decode(x), y)

        for x in [b"", b"ie", b"iae", b"dde", b"2:abc", b"s", b"l"]:
            with self.subTest(x):
                with self.assertRaises(ValueError):
                    bencoding.decode(x)

    def test_encode(self):
        for x, y in self.valid:
            with self.subTest(y):
                self.assertEqual(bencoding.encode(y), x)

        for y in [None, True, 1.0, (0, 1), {0: 1}, {b"a": None}]:
            with self.subTest(y):
                with self.assertRaises(TypeError):
                    bencoding.encode(y)

    def test_encode_text(self):
        self.assertEqual(bencoding.encode("abc"), b"3:abc")
        # The length prefix counts bytes, not characters.
        self.assertEqual(bencoding.encode("é"), b"2:\xc3\xa9")
        self.assertEqual(
            bencoding.encode({"id": "a", b"port": 1}), b"d2:id1:a4:porti1ee"
        )

    def test_keys_are_sorted(self):
        self.assertEqual(
            bencoding.encode({"uploaded": 0, "left": 1}),
            bencoding.encode({"left": 1, "uploaded": 0}),
        )
        self.assertEqual(
            bencoding.encode({"peers": [], "interval": 1800}),
            b"d8:intervali1800e5:peerslee",
        )
        # Byte order, so uppercase sorts before lowercase.
        self.assertEqual(bencoding.encode({"b": 1, "B": 2, "a": 3}), b"d1:Bi2e1:ai3e1:bi1ee")
        self.assertEqual(
            bencoding.encode({"failure reason": "x", "failure code": 101}),
            b"d12:failure codei101e14:failure reason1:xe",
        )
