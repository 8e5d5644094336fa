"""Single-file dead-code detection on Kotlin sources."""

from __future__ import annotations

from langtools.analysis.liveness import (
    CATEGORY_FIELD,
    CATEGORY_LOCAL,
    CATEGORY_PARAMETER,
    CATEGORY_PRIVATE_METHOD,
)
from tests.conftest import findings_for, names_by_category


def kotlin(code):
    return findings_for("kotlin", code)


class TestParameters:
    def test_unused_parameter(self):
        findings = kotlin("""
            class Calc {
                fun twice(value: Int, ignored: Int): Int {
                    return value * 2
                }
            }
        """)
        assert names_by_category(findings) == {CATEGORY_PARAMETER: {"ignored"}}
        assert findings[0].enclosing_scope == "Calc.twice"

    def test_override_is_skipped(self):
        findings = kotlin("""
            class Point {
                override fun equals(other: Any?): Boolean {
                    return true
                }
            }
        """)
        assert findings == []

    def test_function_type_parameter_names_are_not_parameters(self):
        findings = kotlin("""
            class Runner {
                fun run(callback: (value: Int) -> Unit) {
                    callback(1)
                }
            }
        """)
        assert findings == []

    def test_top_level_main_is_skipped(self):
        findings = kotlin("""
            fun main(args: Array<String>) {
                println("hi")
            }
        """)
        assert findings == []

    def test_expression_body_uses_parameter(self):
        findings = kotlin("""
            class Calc {
                fun square(x: Int) = x * x
            }
        """)
        assert findings == []

    def test_secondary_constructor_delegation_uses_parameter(self):
        findings = kotlin("""
            class Pair2(val a: Int, val b: Int) {
                constructor(a: Int, extra: String) : this(a, 0) {
                    println("made")
                }
            }
        """)
        assert names_by_category(findings) == {CATEGORY_PARAMETER: {"extra"}}

    def test_default_value_uses_earlier_parameter(self):
        findings = kotlin("""
            class Calc {
                fun pick(a: Int, b: Int = a): Int {
                    return b
                }
            }
        """)
        assert findings == []


class TestLocals:
    def test_unused_local(self):
        findings = kotlin("""
            class Calc {
                fun compute(): Int {
                    val unused = 5
                    val used = 7
                    return used
                }
            }
        """)
        assert names_by_category(findings) == {CATEGORY_LOCAL: {"unused"}}
        assert findings[0].message == "Local variable 'unused' is never used in method 'compute'"

    def test_for_loop_variable_is_skipped(self):
        findings = kotlin("""
            class Loop {
                fun count(items: List<String>): Int {
                    var total = 0
                    for (item in items) {
                        total += 1
                    }
                    return total
                }
            }
        """)
        assert findings == []

    def test_local_used_in_string_template(self):
        findings = kotlin("""
            class Greeter {
                fun greet(): String {
                    val who = "World"
                    return "Hello $who"
                }
            }
        """)
        assert findings == []


class TestProperties:
    def test_unused_private_property(self):
        findings = kotlin("""
            class Holder {
                private val unused = 1
                private val used = 2
                fun read(): Int = used
            }
        """)
        assert names_by_category(findings) == {CATEGORY_FIELD: {"unused"}}
        assert findings[0].enclosing_scope == "Holder"

    def test_property_used_only_in_string_template(self):
        findings = kotlin("""
            class Greeter {
                private val label = "World"
                fun greet(): String = "Hello $label"
            }
        """)
        assert findings == []

    def test_property_used_in_braced_template(self):
        findings = kotlin("""
            class Greeter {
                private val label = "World"
                fun greet(): String = "Hello ${label.uppercase()}"
            }
        """)
        assert findings == []

    def test_data_class_properties_are_skipped(self):
        findings = kotlin("""
            data class Point(val x: Int, val y: Int) {
                private val cache = 0
            }
        """)
        assert findings == []

    def test_delegated_property_is_skipped(self):
        findings = kotlin("""
            class Config {
                private val settings by lazy { 42 }
            }
        """)
        assert findings == []

    def test_used_inside_object_literal(self):
        findings = kotlin("""
            class Outer {
                private val count = 1
                val task = object : Runnable {
                    override fun run() {
                        println(count)
                    }
                }
            }
        """)
        assert [f for f in findings if f.category == CATEGORY_FIELD] == []

    def test_used_only_in_nested_class_is_flagged(self):
        findings = kotlin("""
            class Outer {
                private val count = 1
                class Inner {
                    fun read(): Int = count
                }
            }
        """)
        fields = [f for f in findings if f.category == CATEGORY_FIELD]
        assert [(f.name, f.enclosing_scope) for f in fields] == [("count", "Outer")]


class TestPrivateFunctions:
    def test_unused_private_function(self):
        findings = kotlin("""
            class Service {
                private fun helper() {}
                fun run() {}
            }
        """)
        assert names_by_category(findings) == {CATEGORY_PRIVATE_METHOD: {"helper"}}

    def test_called_from_lambda(self):
        findings = kotlin("""
            class Runner {
                private fun helper(): Int = 1
                fun run(): () -> Int = { helper() }
            }
        """)
        assert findings == []

    def test_called_through_receiver(self):
        findings = kotlin("""
            class Node {
                private fun depth(): Int = 0
                fun parentDepth(parent: Node): Int = parent.depth() + 1
            }
        """)
        assert findings == []

    def test_callable_reference(self):
        findings = kotlin("""
            class Printer {
                private fun log(s: String) = println(s)
                fun all(items: List<String>) = items.forEach(::log)
            }
        """)
        assert findings == []

    def test_bound_callable_reference(self):
        findings = kotlin("""
            class Mapper {
                private fun helper(i: Int) = i
                fun run() = listOf(1).map(this::helper)
            }
        """)
        assert findings == []

    def test_companion_function_called_from_owner(self):
        findings = kotlin("""
            class Factory {
                fun build(): Int = compute()
                companion object {
                    private fun compute(): Int = 42
                }
            }
        """)
        assert findings == []

    def test_owner_function_called_from_companion(self):
        findings = kotlin("""
            class Factory {
                private fun secret(): Int = 1
                companion object {
                    fun make(f: Factory): Int = f.secret()
                }
            }
        """)
        assert findings == []

    def test_companion_scope_label(self):
        findings = kotlin("""
            class Factory {
                companion object {
                    private fun orphan() {}
                }
            }
        """)
        assert [(f.name, f.enclosing_scope) for f in findings] == [("orphan", "Factory.Companion")]
