"""
TypeScript & JavaScript code interpreter.

Source submitted through the tool interface is statically analyzed and, when
accepted, executed in a short-lived child process.

WARNING: isolation relies on static vetting plus OS process and timeout
controls only. There is no syscall filtering and no container boundary.
"""

__version__ = "2.0.0"
