"""
Scheduling Errors

Exception types raised by the scheduling engine.

Validation errors extend frappe.ValidationError so that the Frappe request
handler returns them to the client as user-facing messages.
"""

import frappe


class SchedulingValidationError(frappe.ValidationError):
	"""Datos de formulario inválidos (fechas faltantes, rango invertido, etc.)."""
	pass


class RepeatRuleError(SchedulingValidationError, ValueError):
	"""Combinación inválida de kind/unit/amount en una regla de repetición."""
	pass


class OverlapConflictError(frappe.ValidationError):
	"""
	Las fechas propuestas se solapan con un Guest Spot/Convention activo.

	El motor reporta conflictos como datos; esta excepción la usan los
	llamadores que deciden no continuar sin confirmación.
	"""

	def __init__(self, overlapping_dates):
		self.overlapping_dates = list(overlapping_dates)
		dates = ", ".join(str(d) for d in self.overlapping_dates)
		super().__init__(f"Guest spot already scheduled on: {dates}")


class CollaboratorFailure(Exception):
	"""Falla de red o de almacenamiento en el colaborador de persistencia."""
	pass
