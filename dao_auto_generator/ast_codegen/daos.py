import logging
import ast
from typing import List

from dao_auto_generator.ast_codegen.base import (
    create_import, create_assign, create_attribute, create_attribute_call, create_self_call,
    create_class_def, create_docstring, create_string_constant, create_constant, create_none_constant,
    create_name, create_call, create_expr, create_return, create_if, create_is_none, create_dict,
    create_list, create_subscript, create_arg, create_function_def, create_module, unparse_module
)
from dao_auto_generator.ast_codegen.layout import PackageLayout
from dao_auto_generator.constants import GenerationOptions, NamingDefaults, PYTHON_TYPE_MAP, RuntimeClasses
from dao_auto_generator.domain.bean_descriptor import BeanDescriptor
from dao_auto_generator.domain.finders import FilterBinding, FinderMethodDescriptor


logger = logging.getLogger(__name__)

TYPING_IMPORTS = ["TYPE_CHECKING", "Any", "Dict", "List", "Optional"]

# Argument names of the generated DAO methods a finder parameter must not shadow
RESERVED_ARGUMENT_NAMES = {"self", "filters", "order_by", "additional_tables_fetch", "mode"}

SERVICE_ATTRIBUTE = "tdbm_service"


def _service_call(method_name: str, args: List[ast.expr]) -> ast.Call:
    return create_attribute_call(create_attribute("self", SERVICE_ATTRIBUTE), method_name, args)


def _optional_arg(name: str, annotation: str) -> ast.arg:
    return create_arg(name, f"Optional[{annotation}]")


def _parameter_name(name: str) -> str:
    while name in RESERVED_ARGUMENT_NAMES:
        name += "_"
    return name


# --- Generic DAO methods ---

def create_dao_constructor() -> ast.FunctionDef:
    return create_function_def(
        "__init__",
        args=[create_arg(SERVICE_ATTRIBUTE, RuntimeClasses.TDBM_SERVICE)],
        body=[create_assign(create_attribute("self", SERVICE_ATTRIBUTE), create_name(SERVICE_ATTRIBUTE))],
        returns="None",
    )


def create_save_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    return create_function_def(
        "save",
        args=[create_arg("obj", descriptor.bean_class_name)],
        body=[create_expr(_service_call("save", [create_name("obj")]))],
        returns="None",
        docstring=f"Persist the {descriptor.bean_class_name} instance.",
    )


def create_find_all_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    return create_function_def(
        "find_all",
        body=[create_return(create_self_call("find"))],
        returns=RuntimeClasses.RESULT_ITERATOR,
        docstring=f"Get all {descriptor.bean_class_name} records.",
    )


def create_get_by_id_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    """get_by_id() takes one argument per primary key column."""
    args = []
    keys = []
    values = []
    for column_name in descriptor.primary_key_columns:
        column = descriptor.table.get_column(column_name)
        name = _parameter_name(descriptor.naming.get_scalar_property_name(column_name))
        args.append(create_arg(name, PYTHON_TYPE_MAP.get(column.field_type.value, "Any")))
        keys.append(column_name)
        values.append(create_name(name))
    args.append(create_arg("lazy_loading", "bool"))

    call = _service_call("find_object_by_pk", [
        create_string_constant(descriptor.table_name),
        create_dict(keys, values),
        create_list([]),
        create_name("lazy_loading"),
        create_name(descriptor.bean_class_name),
    ])
    return create_function_def(
        "get_by_id",
        args=args,
        defaults=[create_constant(False)],
        body=[create_return(call)],
        returns=descriptor.bean_class_name,
        docstring=(
            f"Get {descriptor.bean_class_name} specified by its ID (its primary key).\n\n"
            "If the primary key does not exist, an exception is thrown."
        ),
    )


def create_delete_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    body = [create_if(
        create_name("cascade"),
        [create_expr(_service_call("delete_cascade", [create_name("obj")]))],
        [create_expr(_service_call("delete", [create_name("obj")]))],
    )]
    return create_function_def(
        "delete",
        args=[create_arg("obj", descriptor.bean_class_name), create_arg("cascade", "bool")],
        defaults=[create_constant(False)],
        body=body,
        returns="None",
        docstring=(
            f"Deletes the {descriptor.bean_class_name} passed in parameter.\n\n"
            "With cascade, the objects pointing to it are deleted too."
        ),
    )


def create_find_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    names = ["filters", "parameters", "order_by", "additional_tables_fetch", "mode"]
    annotations = ["Any", "Dict[str, Any]", "Any", "List[str]", "int"]
    call = _service_call("find_objects", [
        create_string_constant(descriptor.table_name),
        create_name("filters"),
        create_name("parameters"),
        create_name("order_by"),
        create_name("additional_tables_fetch"),
        create_name("mode"),
        create_name(descriptor.bean_class_name),
    ])
    return create_function_def(
        "find",
        args=[_optional_arg(name, annotation) for name, annotation in zip(names, annotations)],
        defaults=[create_none_constant() for _ in names],
        body=[create_return(call)],
        returns=RuntimeClasses.RESULT_ITERATOR,
        docstring=f"Get a list of {descriptor.bean_class_name} specified by its filters.",
    )


def create_find_one_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    names = ["filters", "parameters", "additional_tables_fetch"]
    annotations = ["Any", "Dict[str, Any]", "List[str]"]
    call = _service_call("find_object", [
        create_string_constant(descriptor.table_name),
        create_name("filters"),
        create_name("parameters"),
        create_name("additional_tables_fetch"),
        create_name(descriptor.bean_class_name),
    ])
    return create_function_def(
        "find_one",
        args=[_optional_arg(name, annotation) for name, annotation in zip(names, annotations)],
        defaults=[create_none_constant() for _ in names],
        body=[create_return(call)],
        returns=f"Optional[{descriptor.bean_class_name}]",
        docstring=(
            f"Get a single {descriptor.bean_class_name} specified by its filters.\n\n"
            "Raises a too-many-rows error if more than one record matches."
        ),
    )


def create_find_from_sql_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    optional = ["filters", "parameters", "order_by", "mode"]
    annotations = ["Any", "Dict[str, Any]", "Any", "int"]
    call = _service_call("find_objects_from_sql", [
        create_string_constant(descriptor.table_name),
        create_name("from_"),
        create_name("filters"),
        create_name("parameters"),
        create_name("order_by"),
        create_name("mode"),
        create_name(descriptor.bean_class_name),
    ])
    return create_function_def(
        "find_from_sql",
        args=[create_arg("from_", "str")] + [_optional_arg(name, annotation) for name, annotation in zip(optional, annotations)],
        defaults=[create_none_constant() for _ in optional],
        body=[create_return(call)],
        returns=RuntimeClasses.RESULT_ITERATOR,
        docstring=(
            f"Get a list of {descriptor.bean_class_name} specified by its filters, "
            "using a custom FROM clause (joins allowed)."
        ),
    )


def create_find_from_raw_sql_method(descriptor: BeanDescriptor) -> ast.FunctionDef:
    optional = ["parameters", "mode", "count_sql"]
    annotations = ["Dict[str, Any]", "int", "str"]
    call = _service_call("find_objects_from_raw_sql", [
        create_string_constant(descriptor.table_name),
        create_name("sql"),
        create_name("parameters"),
        create_name("mode"),
        create_name(descriptor.bean_class_name),
        create_name("count_sql"),
    ])
    return create_function_def(
        "find_from_raw_sql",
        args=[create_arg("sql", "str")] + [_optional_arg(name, annotation) for name, annotation in zip(optional, annotations)],
        defaults=[create_none_constant() for _ in optional],
        body=[create_return(call)],
        returns=RuntimeClasses.RESULT_ITERATOR,
        docstring=f"Get a list of {descriptor.bean_class_name} from a raw SQL query.",
    )


# --- Finders ---

def _binding_value(binding: FilterBinding, parameter_name: str) -> ast.expr:
    if binding.getter is None:
        return create_name(parameter_name)
    return create_attribute_call(parameter_name, binding.getter)


def create_finder_method(descriptor: BeanDescriptor, finder: FinderMethodDescriptor) -> ast.FunctionDef:
    """
    Creates a find_by_... method.

    The first parameter is required and always bound; the other ones are
    optional and only added to the filters when they are not None.
    """
    parameter_names = {parameter.name: _parameter_name(parameter.name) for parameter in finder.parameters}

    args = []
    defaults = []
    for parameter in finder.parameters:
        name = parameter_names[parameter.name]
        if parameter.required:
            args.append(create_arg(name, parameter.python_type))
        else:
            args.append(_optional_arg(name, parameter.python_type))
            defaults.append(create_none_constant())

    required = [binding for binding in finder.bindings if binding.required]
    optional = [binding for binding in finder.bindings if not binding.required]

    body: List[ast.stmt] = [create_assign("filters", create_dict(
        [binding.column for binding in required],
        [_binding_value(binding, parameter_names[binding.parameter]) for binding in required],
    ))]
    for binding in optional:
        name = parameter_names[binding.parameter]
        body.append(create_if(
            create_is_none(name, negate=True),
            [create_assign(create_subscript("filters", binding.column), _binding_value(binding, name))],
        ))

    described = ", ".join(parameter.name for parameter in finder.parameters)
    if finder.is_unique:
        args.append(_optional_arg("additional_tables_fetch", "List[str]"))
        defaults.append(create_none_constant())
        body.append(create_return(create_self_call("find_one", [
            create_name("filters"), create_dict([], []), create_name("additional_tables_fetch"),
        ])))
        returns = f"Optional[{descriptor.bean_class_name}]"
        docstring = f"Get a {descriptor.bean_class_name} filtered by {described}."
    else:
        for name, annotation in (("order_by", "Any"), ("additional_tables_fetch", "List[str]"), ("mode", "int")):
            args.append(_optional_arg(name, annotation))
            defaults.append(create_none_constant())
        body.append(create_return(create_self_call("find", [
            create_name("filters"), create_dict([], []), create_name("order_by"),
            create_name("additional_tables_fetch"), create_name("mode"),
        ])))
        returns = RuntimeClasses.RESULT_ITERATOR
        docstring = f"Get a list of {descriptor.bean_class_name} filtered by {described}."

    return create_function_def(
        finder.name,
        args=args,
        defaults=defaults,
        body=body,
        returns=returns,
        docstring=docstring,
    )


# --- Modules ---

def create_dao_class(descriptor: BeanDescriptor) -> ast.ClassDef:
    """Creates the AST ClassDef node of a base DAO."""
    body: List[ast.stmt] = [
        create_docstring(
            f"The {descriptor.base_dao_class_name} class will maintain the persistence of "
            f"{descriptor.bean_class_name} class into the {descriptor.table_name} table."
        ),
        create_dao_constructor(),
        create_save_method(descriptor),
        create_find_all_method(descriptor),
        create_get_by_id_method(descriptor),
        create_delete_method(descriptor),
        create_find_method(descriptor),
        create_find_one_method(descriptor),
        create_find_from_sql_method(descriptor),
        create_find_from_raw_sql_method(descriptor),
    ]
    for finder in descriptor.get_finder_method_descriptors():
        body.append(create_finder_method(descriptor, finder))

    return create_class_def(name=descriptor.base_dao_class_name, bases=[], body=body)


def generate_dao_ast(descriptor: BeanDescriptor, layout: PackageLayout) -> ast.Module:
    """Generates the complete AST Module of a base DAO."""
    header = GenerationOptions.GENERATED_HEADER.format(class_name=descriptor.dao_class_name)
    bean_class = descriptor.bean_class_name

    body: List[ast.stmt] = [
        create_docstring(header),
        create_import("__future__", ["annotations"]),
        create_import("typing", TYPING_IMPORTS),
        create_import(layout.runtime_module, RuntimeClasses.DAO_IMPORTS),
        create_import(layout.bean_module(bean_class), [bean_class]),
    ]

    finder_classes = []
    for finder in descriptor.get_finder_method_descriptors():
        for class_name in finder.used_classes:
            if class_name != bean_class and class_name not in finder_classes:
                finder_classes.append(class_name)
    if finder_classes:
        body.append(create_if(create_name("TYPE_CHECKING"), [
            create_import(layout.bean_module(class_name), [class_name]) for class_name in finder_classes
        ]))

    body.append(create_dao_class(descriptor))
    return create_module(body)


def generate_dao_code(descriptor: BeanDescriptor, layout: PackageLayout) -> str:
    """Generates the Python code string of a base DAO module."""
    module_ast = generate_dao_ast(descriptor, layout)
    logger.debug(f"Generated base DAO {descriptor.base_dao_class_name}")
    return unparse_module(module_ast)


def create_dao_factory_class(descriptors: List[BeanDescriptor]) -> ast.ClassDef:
    """Creates the DaoFactory class with one lazy accessor per DAO."""
    init_body: List[ast.stmt] = [
        create_assign(create_attribute("self", SERVICE_ATTRIBUTE), create_name(SERVICE_ATTRIBUTE)),
    ]
    accessors = []
    for descriptor in descriptors:
        dao_class = descriptor.dao_class_name
        attribute = "_" + descriptor.naming.get_module_name(dao_class)
        init_body.append(create_assign(create_attribute("self", attribute), create_none_constant()))
        accessors.append(create_function_def(
            descriptor.naming.get_dao_factory_getter_name(descriptor.table_name),
            body=[
                create_if(create_is_none(create_attribute("self", attribute)), [
                    create_assign(
                        create_attribute("self", attribute),
                        create_call(dao_class, [create_attribute("self", SERVICE_ATTRIBUTE)]),
                    ),
                ]),
                create_return(create_attribute("self", attribute)),
            ],
            returns=dao_class,
            docstring=f"Returns the {dao_class}, instantiated on first call.",
        ))

    constructor = create_function_def(
        "__init__",
        args=[create_arg(SERVICE_ATTRIBUTE, RuntimeClasses.TDBM_SERVICE)],
        body=init_body,
        returns="None",
    )
    return create_class_def(
        name=NamingDefaults.DAO_FACTORY_CLASS,
        bases=[],
        body=[
            create_docstring("The DaoFactory provides an easy access to all DAOs generated by DAO Auto Generator."),
            constructor,
        ] + accessors,
    )


def generate_dao_factory_code(descriptors: List[BeanDescriptor], layout: PackageLayout) -> str:
    """Generates the Python code string of the DAO factory module."""
    body: List[ast.stmt] = [
        create_docstring(
            "This file has been automatically generated by DAO Auto Generator.\n"
            "DO NOT edit this file, as it might be overwritten."
        ),
        create_import("__future__", ["annotations"]),
        create_import(layout.runtime_module, [RuntimeClasses.TDBM_SERVICE]),
    ]
    for descriptor in descriptors:
        body.append(create_import(layout.dao_module(descriptor.dao_class_name), [descriptor.dao_class_name]))
    body.append(create_dao_factory_class(descriptors))
    return unparse_module(create_module(body))
