"""Parser logic for the XML documents that are returned by OGC services.

The :mod:`owsclient.parsers.xml` module offers a safe XML parser and the
namespace-agnostic lookups that the WMS and WFS readers use.
Different server vendors use different namespace aliases (or none at all),
hence all lookups happen by local name.
"""
