"""JSON Web Encryption engine.

This package implements the encryption half of a JOSE toolkit, in
particular `JSON Web Encryption (JWE)`_: key management and content
encryption dispatch, the Compact and Flattened JSON serializations, and
an ACME style signed packet builder on top of josepy's JWS algorithms.

.. _`JSON Web Encryption (JWE)`: https://datatracker.ietf.org/doc/html/rfc7516

"""
