#!/usr/bin/env python3

#============================================

class WurqitError(RuntimeError):
	pass

#============================================

class ConfigurationError(WurqitError):
	pass

#============================================

class ValidationError(WurqitError):
	pass

#============================================

class CatalogError(WurqitError):
	pass

#============================================

class SelectionError(WurqitError):
	pass

#============================================

class RenderError(WurqitError):
	def __init__(self, message: str, output_file: str = None,
		diagnostics: str = None):
		super().__init__(message)
		self.output_file = output_file
		self.diagnostics = diagnostics

#============================================

class AssemblyError(WurqitError):
	def __init__(self, message: str, output_file: str = None,
		diagnostics: str = None):
		super().__init__(message)
		self.output_file = output_file
		self.diagnostics = diagnostics

#============================================

class WorkspaceError(WurqitError, OSError):
	pass

#============================================

class CancelledError(WurqitError):
	pass
