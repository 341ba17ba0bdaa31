"""Shared fixtures."""

import pytest

from upgrade_risk.config import reset_config
from upgrade_risk.parsers.diff import parse_diff


@pytest.fixture(autouse=True)
def fresh_config():
    """Drop the global config between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def node_engine_diff():
    """A package.json diff raising the Node.js engine requirement."""
    return """diff --git a/package.json b/package.json
index 1111111..2222222 100644
--- a/package.json
+++ b/package.json
@@ -1,8 +1,8 @@
 {
   "name": "pkg",
-  "version": "6.2.0",
+  "version": "7.0.0",
   "engines": {
-    "node": ">=16"
+    "node": ">=18"
   }
 }
"""


@pytest.fixture
def relocated_export_diff():
    """A diff that moves ``foo`` between files without changing it."""
    return """diff --git a/lib/a.js b/lib/a.js
--- a/lib/a.js
+++ b/lib/a.js
@@ -1,3 +1,1 @@
-export function foo(a) {
-  return a;
-}
diff --git a/lib/b.js b/lib/b.js
--- a/lib/b.js
+++ b/lib/b.js
@@ -0,0 +1,3 @@
+export function foo(a) {
+  return a;
+}
"""


@pytest.fixture
def signature_change_diff():
    """A TypeScript diff adding a parameter to ``bar``."""
    return """diff --git a/src/index.ts b/src/index.ts
--- a/src/index.ts
+++ b/src/index.ts
@@ -1,3 +1,3 @@
-export function bar(a: number): number {
+export function bar(a: number, b: string): number {
   return a;
 }
"""


@pytest.fixture
def removed_export_diff():
    """A diff deleting an exported function."""
    return """diff --git a/index.js b/index.js
--- a/index.js
+++ b/index.js
@@ -1,6 +1,3 @@
 export function keep() {}
-export function legacyHelper(x) {
-  return x;
-}
"""


@pytest.fixture
def helpers_only_diff():
    """A diff that only touches test helpers."""
    return """diff --git a/tests/helpers.js b/tests/helpers.js
--- a/tests/helpers.js
+++ b/tests/helpers.js
@@ -1,2 +1,2 @@
-export function makeFixture(a) {}
+export function makeFixture(a, b) {}
"""


@pytest.fixture
def additions_only_diff():
    """A diff that only adds new exports."""
    return """diff --git a/index.js b/index.js
--- a/index.js
+++ b/index.js
@@ -1,1 +1,4 @@
+export function shinyNew(a) {
+  return a;
+}
+export const VERSION = "2.0.0";
"""


@pytest.fixture
def lockfile_diff():
    """A diff touching only lockfiles."""
    return """diff --git a/package-lock.json b/package-lock.json
--- a/package-lock.json
+++ b/package-lock.json
@@ -10,3 +10,3 @@
-      "version": "1.2.3",
+      "version": "1.2.4",
diff --git a/yarn.lock b/yarn.lock
--- a/yarn.lock
+++ b/yarn.lock
@@ -1,1 +1,1 @@
-pkg@^1.2.3:
+pkg@^1.2.4:
"""


@pytest.fixture
def changelog_text():
    """Release notes with a breaking changes section and markers."""
    return """# Changelog

## 3.0.0

### Breaking Changes

- Dropped support for Python 3.8
- `Client.fetch` now returns an iterator
  instead of a list

### Features

- Added retry support
- DEPRECATED: `Client.get_all` will be removed in 4.0

## 2.5.0

- [REMOVED] legacy `connect()` helper
"""


@pytest.fixture
def parse():
    """Parse raw diff text."""
    return parse_diff
