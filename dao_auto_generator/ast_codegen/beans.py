import logging
import ast
from collections import OrderedDict
from typing import Dict, List

from dao_auto_generator.ast_codegen.base import (
    create_import, create_assign, create_attribute_call, create_self_call, create_super_call,
    create_class_def, create_docstring, create_string_constant, create_constant, create_none_constant,
    create_name, create_call, create_expr, create_return, create_if, create_if_expression, create_is_none,
    create_not, create_dict, create_list_of_strings, create_list_comprehension, create_subscript,
    create_arg, create_function_def, create_module, unparse_module
)
from dao_auto_generator.ast_codegen.layout import PackageLayout
from dao_auto_generator.constants import GenerationOptions, RuntimeClasses
from dao_auto_generator.domain.bean_descriptor import BeanDescriptor
from dao_auto_generator.domain.methods import DirectForeignKeyMethodDescriptor, PivotTableMethodsDescriptor
from dao_auto_generator.domain.models import CloneRule
from dao_auto_generator.domain.properties import (
    AbstractBeanPropertyDescriptor,
    CURRENT_TIMESTAMP,
    ObjectBeanPropertyDescriptor,
    ScalarBeanPropertyDescriptor,
)


logger = logging.getLogger(__name__)

TYPING_IMPORTS = ["TYPE_CHECKING", "Any", "Dict", "List", "Optional"]


def _annotation(descriptor: AbstractBeanPropertyDescriptor) -> str:
    # Auto-incremented keys are None until the row is saved, and again after on_clone()
    auto_increment = isinstance(descriptor, ScalarBeanPropertyDescriptor) and descriptor.column.is_auto_increment
    if descriptor.is_nullable or auto_increment:
        return f"Optional[{descriptor.python_type}]"
    return descriptor.python_type


def _default_value_expr(descriptor: ScalarBeanPropertyDescriptor) -> ast.expr:
    value = descriptor.get_default_value()
    if value is CURRENT_TIMESTAMP:
        if descriptor.field_type_value == "date":
            return create_attribute_call("date", "today")
        if descriptor.field_type_value == "time":
            return create_attribute_call(create_attribute_call("datetime", "now"), "time")
        return create_attribute_call("datetime", "now")
    if descriptor.python_type == "Decimal" and isinstance(value, str):
        return create_call("Decimal", [create_string_constant(value)])
    return create_constant(value)


def _uses_datetime_now(descriptor: BeanDescriptor) -> bool:
    return any(
        isinstance(prop, ScalarBeanPropertyDescriptor)
        and prop.get_default_value() is CURRENT_TIMESTAMP
        and prop.field_type_value != "date"
        for prop in descriptor.get_properties_with_default()
    )


# --- Constructor ---

def create_constructor(descriptor: BeanDescriptor) -> ast.FunctionDef:
    """Creates the constructor taking all compulsory properties, ancestors' first."""
    args = []
    parent_args = []
    body: List[ast.stmt] = []

    for prop in descriptor.get_constructor_properties():
        args.append(create_arg(prop.variable_name, _annotation(prop)))
        if prop.table is descriptor.table:
            body.append(create_expr(create_self_call(prop.setter_name, [create_name(prop.variable_name)])))
        else:
            parent_args.append(create_name(prop.variable_name))

    body.insert(0, create_expr(create_super_call("__init__", parent_args)))

    for prop in descriptor.get_properties_with_default():
        body.append(create_expr(create_self_call(prop.setter_name, [_default_value_expr(prop)])))

    return create_function_def(
        "__init__",
        args=args,
        body=body,
        returns="None",
        docstring="The constructor takes all compulsory arguments.",
    )


# --- Getters and setters ---

def create_property_accessors(descriptor: BeanDescriptor, prop: AbstractBeanPropertyDescriptor) -> List[ast.FunctionDef]:
    """Creates the getter/setter pair of one exposed property."""
    table_name = create_string_constant(descriptor.table_name)
    value = create_name(prop.variable_name)

    if isinstance(prop, ObjectBeanPropertyDescriptor):
        fk_name = create_string_constant(prop.foreign_key.name)
        getter_body = [create_return(create_self_call("get_ref", [fk_name, table_name]))]
        setter_body = [create_expr(create_self_call("set_ref", [fk_name, value, table_name]))]
        getter_doc = f"Returns the {prop.class_name} object bound to this object via the {', '.join(prop.local_columns)} column(s)."
        setter_doc = f"The setter for the {prop.class_name} object bound to this object via the {', '.join(prop.local_columns)} column(s)."
    else:
        column = create_string_constant(prop.column_name)
        getter_body = [create_return(create_self_call("get", [column, table_name]))]
        setter_body = [create_expr(create_self_call("set", [column, value, table_name]))]
        getter_doc = f'The getter for the "{prop.column_name}" column.'
        setter_doc = f'The setter for the "{prop.column_name}" column.'

    return [
        create_function_def(prop.getter_name, body=getter_body, returns=_annotation(prop), docstring=getter_doc),
        create_function_def(
            prop.setter_name,
            args=[create_arg(prop.variable_name, _annotation(prop))],
            body=setter_body,
            returns="None",
            docstring=setter_doc,
        ),
    ]


# --- Relationship methods ---

def create_direct_foreign_key_method(descriptor: BeanDescriptor, method: DirectForeignKeyMethodDescriptor) -> ast.FunctionDef:
    """Creates the getter returning the beans pointing to this one."""
    local_table = create_string_constant(method.foreign_key.local_table_name)
    filters = create_dict(
        list(method.filter_columns.keys()),
        [
            create_self_call("get", [create_string_constant(column), create_string_constant(descriptor.table_name)])
            for column in method.filter_columns.values()
        ],
    )
    call = create_self_call(
        "retrieve_many_to_one_relationships_storage",
        [local_table, create_string_constant(method.foreign_key.name), local_table, filters],
    )
    return create_function_def(
        method.name,
        body=[create_return(call)],
        returns=RuntimeClasses.ALTERABLE_RESULT_ITERATOR,
        docstring=(
            f"Returns the list of {method.bean_class_name} pointing to this bean via the "
            f"{', '.join(method.foreign_key.local_columns)} column(s)."
        ),
    )


def create_pivot_methods(method: PivotTableMethodsDescriptor) -> List[ast.FunctionDef]:
    """Creates the get_, add_, remove_, has_ and set_ methods of a many-to-many relationship."""
    path_key = create_string_constant(method.path_key)
    remote_class = method.remote_bean_class_name
    single = method.remote_variable_name
    plural = method.remote_plural_variable_name

    return [
        create_function_def(
            method.name,
            body=[create_return(create_self_call("_get_relationships", [path_key]))],
            returns=f"List[{remote_class}]",
            docstring=f"Returns the list of {remote_class} associated to this bean via the {method.path_key} pivot table.",
        ),
        create_function_def(
            method.add_method_name,
            args=[create_arg(single, remote_class)],
            body=[create_expr(create_self_call("add_relationship", [path_key, create_name(single)]))],
            returns="None",
            docstring=f"Adds a relationship with {remote_class} associated to this bean via the {method.path_key} pivot table.",
        ),
        create_function_def(
            method.remove_method_name,
            args=[create_arg(single, remote_class)],
            body=[create_expr(create_self_call("_remove_relationship", [path_key, create_name(single)]))],
            returns="None",
            docstring=f"Deletes the relationship with {remote_class} associated to this bean via the {method.path_key} pivot table.",
        ),
        create_function_def(
            method.has_method_name,
            args=[create_arg(single, remote_class)],
            body=[create_return(create_self_call("has_relationship", [path_key, create_name(single)]))],
            returns="bool",
            docstring=f"Returns whether this bean is associated with {single} via the {method.path_key} pivot table.",
        ),
        create_function_def(
            method.set_method_name,
            args=[create_arg(plural, f"List[{remote_class}]")],
            body=[create_expr(create_self_call("set_relationships", [path_key, create_name(plural)]))],
            returns="None",
            docstring=f"Sets all relationships with {remote_class} associated to this bean via the {method.path_key} pivot table.",
        ),
    ]


# --- Serialization and lifecycle hooks ---

def _scalar_json_value(prop: ScalarBeanPropertyDescriptor) -> ast.expr:
    getter = create_self_call(prop.getter_name)
    if prop.is_temporal:
        converted = create_attribute_call(create_self_call(prop.getter_name), "isoformat")
    elif prop.is_stringified:
        converted = create_call("str", [create_self_call(prop.getter_name)])
    else:
        return getter
    return create_if_expression(create_is_none(getter, negate=True), converted, create_none_constant())


def create_json_serialize(descriptor: BeanDescriptor) -> ast.FunctionDef:
    """
    Creates json_serialize(), starting from the parent's result and adding own
    scalars, then (unless stop_recursion is set) object references and
    many-to-many summaries.
    """
    if descriptor.get_extended_bean_class_name():
        initializer = create_super_call("json_serialize", [create_name("stop_recursion")])
    else:
        initializer = create_dict([], [])
    body: List[ast.stmt] = [create_assign("array", initializer)]

    recursive: List[ast.stmt] = []
    for prop in descriptor.get_exposed_properties():
        target = create_subscript("array", prop.variable_name)
        if isinstance(prop, ObjectBeanPropertyDescriptor):
            getter = create_self_call(prop.getter_name)
            value = create_if_expression(
                create_is_none(getter, negate=True),
                create_attribute_call(create_self_call(prop.getter_name), "json_serialize", [create_constant(True)]),
                create_none_constant(),
            )
            recursive.append(create_assign(target, value))
        elif prop.is_serializable:
            body.append(create_assign(target, _scalar_json_value(prop)))

    for method in descriptor.get_method_descriptors():
        if isinstance(method, PivotTableMethodsDescriptor):
            element = create_attribute_call(method.remote_variable_name, "json_serialize", [create_constant(True)])
            value = create_list_comprehension(element, method.remote_variable_name, create_self_call(method.name))
            recursive.append(create_assign(create_subscript("array", method.json_key), value))

    if recursive:
        body.append(create_if(create_not("stop_recursion"), recursive))

    body.append(create_return(create_name("array")))
    return create_function_def(
        "json_serialize",
        args=[create_arg("stop_recursion", "bool")],
        defaults=[create_constant(False)],
        body=body,
        returns="Dict[str, Any]",
        docstring=(
            "Serializes the object for JSON encoding.\n\n"
            "stop_recursion is used internally to stop embedded objects from embedding other objects."
        ),
    )


def create_get_used_tables(descriptor: BeanDescriptor) -> ast.FunctionDef:
    """Creates get_used_tables(), returning the tables of the bean from parent to child."""
    if descriptor.get_extended_bean_class_name():
        body = [
            create_assign("tables", create_super_call("get_used_tables")),
            create_expr(create_attribute_call("tables", "append", [create_string_constant(descriptor.table_name)])),
            create_return(create_name("tables")),
        ]
    else:
        body = [create_return(create_list_of_strings([descriptor.table_name]))]

    return create_function_def(
        "get_used_tables",
        body=body,
        returns="List[str]",
        docstring="Returns the list of tables used by this bean (from parent to child relationship).",
    )


def create_on_delete(descriptor: BeanDescriptor):
    """Creates on_delete(), or returns None when the bean owns no foreign key."""
    properties = descriptor.get_on_delete_properties()
    if not properties:
        return None

    body: List[ast.stmt] = [create_expr(create_super_call("on_delete"))]
    for prop in properties:
        body.append(create_expr(create_self_call("set_ref", [
            create_string_constant(prop.foreign_key.name),
            create_none_constant(),
            create_string_constant(descriptor.table_name),
        ])))

    return create_function_def(
        "on_delete",
        body=body,
        returns="None",
        docstring="Method called when the bean is removed from database.",
    )


def create_on_clone(descriptor: BeanDescriptor) -> ast.FunctionDef:
    """Creates on_clone(), applying the clone rule of every own property."""
    body: List[ast.stmt] = [create_expr(create_super_call("on_clone"))]
    for prop, rule in descriptor.get_clone_rules():
        if rule is CloneRule.RESET:
            body.append(create_expr(create_self_call(prop.setter_name, [create_none_constant()])))
        elif rule is CloneRule.REFERENCE:
            body.append(create_expr(create_self_call(prop.setter_name, [create_self_call(prop.getter_name)])))

    return create_function_def(
        "on_clone",
        body=body,
        returns="None",
        docstring="Method called on the copy when the bean is cloned.",
    )


# --- Module ---

def _collect_type_imports(descriptor: BeanDescriptor) -> Dict[str, List[str]]:
    imports: Dict[str, List[str]] = OrderedDict()
    for prop in descriptor.get_exposed_properties():
        for module, name in prop.type_imports:
            names = imports.setdefault(module, [])
            if name not in names:
                names.append(name)
    if _uses_datetime_now(descriptor):
        names = imports.setdefault("datetime", [])
        if "datetime" not in names:
            names.append("datetime")
    return imports


def create_bean_class(descriptor: BeanDescriptor) -> ast.ClassDef:
    """Creates the AST ClassDef node of a base bean."""
    extended = descriptor.get_extended_bean_class_name() or RuntimeClasses.ABSTRACT_OBJECT

    body: List[ast.stmt] = [
        create_docstring(f"The {descriptor.base_bean_class_name} class maps the '{descriptor.table_name}' table in database."),
        create_constructor(descriptor),
    ]

    for prop in descriptor.get_exposed_properties():
        body.extend(create_property_accessors(descriptor, prop))

    for method in descriptor.get_method_descriptors():
        if isinstance(method, PivotTableMethodsDescriptor):
            body.extend(create_pivot_methods(method))
        else:
            body.append(create_direct_foreign_key_method(descriptor, method))

    body.append(create_json_serialize(descriptor))
    body.append(create_get_used_tables(descriptor))
    on_delete = create_on_delete(descriptor)
    if on_delete is not None:
        body.append(on_delete)
    body.append(create_on_clone(descriptor))

    return create_class_def(name=descriptor.base_bean_class_name, bases=[extended], body=body)


def generate_bean_ast(descriptor: BeanDescriptor, layout: PackageLayout) -> ast.Module:
    """Generates the complete AST Module of a base bean."""
    header = GenerationOptions.GENERATED_HEADER.format(class_name=descriptor.bean_class_name)
    extended = descriptor.get_extended_bean_class_name()

    runtime_names = list(RuntimeClasses.BEAN_IMPORTS)
    if extended is not None:
        runtime_names.remove(RuntimeClasses.ABSTRACT_OBJECT)

    body: List[ast.stmt] = [
        create_docstring(header),
        create_import("__future__", ["annotations"]),
        create_import("typing", TYPING_IMPORTS),
    ]
    for module, names in _collect_type_imports(descriptor).items():
        body.append(create_import(module, names))
    body.append(create_import(layout.runtime_module, runtime_names))

    if extended is not None:
        body.append(create_import(layout.bean_module(extended), [extended]))

    type_checking_imports = [
        create_import(layout.bean_module(class_name), [class_name])
        for class_name in descriptor.get_used_classes()
        if class_name != extended
    ]
    if type_checking_imports:
        body.append(create_if(create_name("TYPE_CHECKING"), type_checking_imports))

    body.append(create_bean_class(descriptor))
    return create_module(body)


def generate_bean_code(descriptor: BeanDescriptor, layout: PackageLayout) -> str:
    """Generates the Python code string of a base bean module."""
    module_ast = generate_bean_ast(descriptor, layout)
    logger.debug(f"Generated base bean {descriptor.base_bean_class_name}")
    return unparse_module(module_ast)
