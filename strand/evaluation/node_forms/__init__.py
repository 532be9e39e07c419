"""Registry of node evaluators for the Strand trampoline.

Maps every NodeKind to the function that evaluates it. An evaluator takes
(node, env, k) and returns the next pending step; it never recurses into the
evaluation of a child, it hands the child back to the driver instead.
"""

from strand.types.node import NodeKind
from strand.evaluation.node_forms.constant_forms import constant_form, noop_form, yield_form, suspend_form
from strand.evaluation.node_forms.lvalue import read_form, lvalue_form
from strand.evaluation.node_forms.variable_forms import declare_form, assign_form, increment_form
from strand.evaluation.node_forms.block_forms import sequence_form, block_form
from strand.evaluation.node_forms.if_form import if_form, logical_op_form, not_form, elvis_form
from strand.evaluation.node_forms.loop_forms import while_form, do_while_form, for_loop_form, for_in_loop_form
from strand.evaluation.node_forms.jump_forms import break_form, continue_form, return_form
from strand.evaluation.node_forms.switch_form import switch_form
from strand.evaluation.node_forms.call_forms import function_call_form, new_form, method_pointer_form, closure_form
from strand.evaluation.node_forms.try_catch_form import try_form, throw_form
from strand.evaluation.node_forms.assert_form import assert_form
from strand.evaluation.node_forms.operator_forms import binary_op_form, unary_op_form, cast_form, instance_of_form
from strand.evaluation.node_forms.collection_forms import collection_literal_form, range_form, spread_form
from strand.evaluation.node_forms.safepoint_form import safepoint_form

NODE_FORMS = {
    NodeKind.CONSTANT: constant_form,
    NodeKind.NOOP: noop_form,
    NodeKind.LOCAL_VARIABLE: read_form,
    NodeKind.DECLARE_VARIABLE: declare_form,
    NodeKind.LVALUE: lvalue_form,
    NodeKind.ASSIGN: assign_form,
    NodeKind.INCREMENT: increment_form,
    NodeKind.PROPERTY: read_form,
    NodeKind.ATTRIBUTE: read_form,
    NodeKind.INDEX: read_form,
    NodeKind.STATIC_FIELD: read_form,
    NodeKind.SEQUENCE: sequence_form,
    NodeKind.BLOCK: block_form,
    NodeKind.IF: if_form,
    NodeKind.WHILE: while_form,
    NodeKind.DO_WHILE: do_while_form,
    NodeKind.FOR: for_loop_form,
    NodeKind.FOR_IN: for_in_loop_form,
    NodeKind.BREAK: break_form,
    NodeKind.CONTINUE: continue_form,
    NodeKind.RETURN: return_form,
    NodeKind.SWITCH: switch_form,
    NodeKind.CALL: function_call_form,
    NodeKind.NEW: new_form,
    NodeKind.METHOD_POINTER: method_pointer_form,
    NodeKind.CLOSURE: closure_form,
    NodeKind.TRY: try_form,
    NodeKind.THROW: throw_form,
    NodeKind.ASSERT: assert_form,
    NodeKind.LOGICAL_AND: logical_op_form,
    NodeKind.LOGICAL_OR: logical_op_form,
    NodeKind.NOT: not_form,
    NodeKind.ELVIS: elvis_form,
    NodeKind.BINARY_OP: binary_op_form,
    NodeKind.UNARY_OP: unary_op_form,
    NodeKind.CAST: cast_form,
    NodeKind.INSTANCE_OF: instance_of_form,
    NodeKind.LIST: collection_literal_form,
    NodeKind.MAP: collection_literal_form,
    NodeKind.RANGE: range_form,
    NodeKind.SPREAD: spread_form,
    NodeKind.SPREAD_MAP: spread_form,
    NodeKind.YIELD: yield_form,
    NodeKind.SUSPEND: suspend_form,
    NodeKind.SAFEPOINT: safepoint_form,
}
