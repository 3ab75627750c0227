"""Console output shared by the test result tests"""

XCTEST_OUTPUT = """Test Suite 'All tests' started at 2024-01-01 12:00:00.000
Test Suite 'CalculatorTests' started at 2024-01-01 12:00:00.001
Test Case '-[AppTests.CalculatorTests testAdd]' started.
Test Case '-[AppTests.CalculatorTests testAdd]' passed (0.001 seconds).
Test Case '-[AppTests.CalculatorTests testSubtract]' started.
Test Case '-[AppTests.CalculatorTests testSubtract]' passed (0.001 seconds).
Test Case '-[AppTests.CalculatorTests testMultiply]' started.
Test Case '-[AppTests.CalculatorTests testMultiply]' passed (0.001 seconds).
Test Case '-[AppTests.CalculatorTests testDivide]' started.
/Users/dev/App/AppTests/CalculatorTests.swift:42: error: -[AppTests.CalculatorTests testDivide] : XCTAssertEqual failed: ("2") is not equal to ("3")
Test Case '-[AppTests.CalculatorTests testDivide]' failed (0.002 seconds).
Test Suite 'CalculatorTests' failed at 2024-01-01 12:00:00.009.
\t Executed 4 tests, with 1 failure (0 unexpected) in 0.005 (0.006) seconds
Test Suite 'All tests' failed at 2024-01-01 12:00:00.010.
\t Executed 4 tests, with 1 failure (0 unexpected) in 0.005 (0.007) seconds
"""

SWIFT_TESTING_EMPTY_OUTPUT = """◇ Test run started.
↳ Testing Library Version: 102 (arm64e-apple-macos13.0)
✔ Test run with 0 tests passed after 0.001 seconds.
"""

SWIFT_TESTING_OUTPUT = """◇ Test run started.
◇ Test addition() started.
✔ Test addition() passed after 0.001 seconds.
◇ Test division() started.
✘ Test division() recorded an issue at MathTests.swift:12:5: Expectation failed: (result → 3) == 4
✘ Test division() failed after 0.002 seconds with 1 issue.
◇ Test "Subtraction works" started.
✔ Test "Subtraction works" passed after 0.001 seconds.
✘ Test run with 3 tests failed after 0.004 seconds with 1 issue.
"""
