"""
Commands module behavioral tests.

Scope
- Validate Registry.create() naming rules, duplicates and the one-char override.
- Validate Command builders: aliases, help/manual, permissions, handlers, extras.
- Validate queries: usage, manual text, serialization, lookups.
- Validate the lifecycle: enable/disable and destroy.

Conventions
- Test method names follow CamelCase per project convention.
"""
import json
import unittest
from unittest import TestCase

from parlance import Command, Config, Registry, argument


def registry():
    return Registry(Config("!"))


class TestRegistryCreate(TestCase):
    """Behavioral tests for command registration."""

    def testCreateRegistersInOrder(self):
        commands = registry()
        foo = commands.create("foo")
        bar = commands.create("bar")
        self.assertEqual(list(commands), [foo, bar])
        self.assertEqual(len(commands), 2)
        self.assertIn(foo, commands)
        self.assertIs(foo.registry, commands)

    def testNameMustBeString(self):
        with self.assertRaises(TypeError) as context:
            registry().create(42)
        self.assertEqual(str(context.exception), "Expected a string as command name!")

    def testNameTooShort(self):
        for name in ("", "x"):
            with self.assertRaises(ValueError) as context:
                registry().create(name)
            self.assertEqual(str(context.exception), "Command should have a minimum length of 2!")

    def testOneCharOverride(self):
        self.assertEqual(registry().create("x", Command.ONE_CHAR_OVERRIDE).command, "x")

    def testWrongOverrideRejected(self):
        with self.assertRaises(ValueError):
            registry().create("x", "yes")

    def testDuplicateNameWarns(self):
        commands = registry()
        commands.create("foo")
        with self.assertLogs("parlance.commands", "WARNING") as logs:
            commands.create("foo")
        self.assertEqual(len(commands), 2)
        self.assertIn("already a command", logs.output[0])

    def testRegistryNeedsConfig(self):
        with self.assertRaises(TypeError):
            Registry({"PREFIX": "!"})

    def testDefaultConfig(self):
        self.assertEqual(Registry().prefix, "!")


class TestCommandBuilders(TestCase):
    """Behavioral tests for the chaining builders."""

    def testBuildersChain(self):
        commands = registry()
        foo = commands.create("foo")
        self.assertIs(
            foo.help("h").manual("m").alias("f").argument(argument("string")).exec(print).ignore_extra_args(),
            foo,
        )
        self.assertTrue(foo.extras)

    def testAliases(self):
        foo = registry().create("foo").alias("f1", "f2")
        self.assertEqual(foo.aliases, ["f1", "f2"])
        self.assertEqual(foo.names, ("foo", "f1", "f2"))
        self.assertTrue(foo.matches("f2"))
        self.assertFalse(foo.matches("FOO"))
        self.assertTrue(all(foo.matches(name) for name in foo.names))

    def testAliasSameAsName(self):
        with self.assertRaises(ValueError):
            registry().create("foo").alias("foo")

    def testDuplicateAlias(self):
        foo = registry().create("foo").alias("f1")
        with self.assertRaises(ValueError):
            foo.alias("f1")
        with self.assertRaises(ValueError):
            foo.alias("f2", "f2")
        self.assertEqual(foo.aliases, ["f1"])

    def testAliasMustBeString(self):
        with self.assertRaises(TypeError):
            registry().create("foo").alias(1)

    def testInvalidBuilderValues(self):
        foo = registry().create("foo")
        with self.assertRaises(TypeError):
            foo.help(1)
        with self.assertRaises(TypeError):
            foo.argument("string")
        with self.assertRaises(TypeError):
            foo.exec("handler")
        with self.assertRaises(TypeError):
            foo.check_permission(True)

    def testHelpAndManual(self):
        foo = registry().create("foo")
        self.assertFalse(foo.has_help)
        self.assertFalse(foo.has_manual)
        foo.help("Does foo").manual("line one").manual("line two")
        self.assertTrue(foo.has_help)
        self.assertTrue(foo.has_manual)
        self.assertEqual(foo.manual_text, "line one\r\nline two")

    def testPermissionPredicate(self):
        foo = registry().create("foo")
        self.assertTrue(foo.is_allowed(object()))
        foo.check_permission(lambda client: client == "admin")
        self.assertTrue(foo.is_allowed("admin"))
        self.assertFalse(foo.is_allowed("guest"))

    def testPermissionErrorsPropagate(self):
        def broken(client):
            raise LookupError("no groups")

        foo = registry().create("foo").check_permission(broken)
        with self.assertRaises(LookupError):
            foo.is_allowed("anyone")

    def testDispatchCommandCallsHandler(self):
        calls = []
        foo = registry().create("foo").exec(lambda *args: calls.append(args) or "done")
        self.assertEqual(foo.dispatch_command("client", {"a": 1}, print, "event"), "done")
        self.assertEqual(calls, [("client", {"a": 1}, print, "event")])

    def testDefaultHandlerDoesNothing(self):
        self.assertIsNone(registry().create("foo").dispatch_command("client", {}, print, None))


class TestCommandQueries(TestCase):
    """Behavioral tests for usage, serialization and lookups."""

    def testUsage(self):
        commands = registry()
        foo = (commands.create("foo")
            .argument(argument("string", "name"))
            .argument(argument("number", "age").optional(0)))
        self.assertEqual(foo.usage, "!foo <name> [age=0]")
        self.assertEqual(commands.create("bar").usage, "!bar ")

    def testUsageFollowsPrefix(self):
        commands = Registry(Config(lambda: "#"))
        self.assertEqual(commands.create("foo").usage, "#foo ")

    def testSerialize(self):
        foo = registry().create("foo").alias("f").help("h").manual("m1").manual("m2")
        self.assertEqual(json.loads(foo.serialize()), {
            "cmd": "foo",
            "alias": ["f"],
            "help": "h",
            "manual": ["m1", "m2"],
        })

    def testGetIgnoresAliases(self):
        commands = registry()
        foo = commands.create("foo").alias("f1")
        self.assertIs(commands.get("foo"), foo)
        self.assertIsNone(commands.get("f1"))

    def testFindSkipsDisabled(self):
        commands = registry()
        first = commands.create("foo")
        second = commands.create("bar").alias("foo")
        self.assertEqual(commands.find("foo"), [first, second])
        second.disable()
        self.assertEqual(commands.find("foo"), [first])
        self.assertEqual(commands.find("baz"), [])

    def testAvailable(self):
        commands = registry()
        public = commands.create("public")
        secret = commands.create("secret").check_permission(lambda client: client == "admin")
        commands.create("off").disable()
        self.assertEqual(commands.available("guest"), [public])
        self.assertEqual(commands.available("admin"), [public, secret])
        self.assertEqual(commands.available("admin", "secret"), [secret])
        self.assertEqual(commands.available("guest", "secret"), [])


class TestCommandLifecycle(TestCase):
    """Behavioral tests for enable/disable and destroy."""

    def testEnableDisableLogs(self):
        foo = registry().create("foo")
        with self.assertLogs("parlance.commands", "INFO") as logs:
            foo.disable()
            foo.enable()
        self.assertTrue(foo.enabled)
        self.assertEqual(len(logs.output), 2)

    def testDestroyRemovesFromRegistry(self):
        commands = registry()
        foo = commands.create("foo")
        self.assertIsNone(foo.destroy())
        self.assertNotIn(foo, commands)
        self.assertTrue(foo.destroyed)
        self.assertIsNone(foo.registry)

    def testDestroyedCommandRejectsUse(self):
        foo = registry().create("foo")
        foo.destroy()
        with self.assertRaises(RuntimeError):
            foo.help("late")
        with self.assertRaises(RuntimeError):
            foo.dispatch_command(None, {}, print, None)
        with self.assertRaises(RuntimeError):
            foo.destroy()

    def testRepr(self):
        self.assertTrue(repr(registry().create("foo")).startswith("command(command='foo'"))


if __name__ == "__main__":
    unittest.main()
