import inspect


class CommandRegistrationError(Exception):
    """Two mdprev subcommands ended up with the same name."""

# subcommand name -> handler, help text and argparse argument specs; filled
# in when command_line imports the render, server and preview modules
_COMMAND_SPECS = {}


def registered_commands():
    """Return the live registry that command_line builds its parser from."""
    return _COMMAND_SPECS


def register_command(help_text, description=None, help=None):
    """Expose the decorated function as ``mdprev <name>``.

    The subcommand name is the function name with dashes for underscores
    (``render``, ``serve``, ``preview``).  Required parameters such as
    ``filename`` turn into positional arguments; parameters with defaults
    become options (``port=3000`` gives ``--port`` parsed as int,
    ``live_reload=False`` gives a ``--live-reload`` switch, ``output=None``
    gives a plain string option).  ``help`` maps parameter names to the
    text argparse shows for them.
    """

    def decorator(func):
        name = func.__name__.replace("_", "-")
        if name in _COMMAND_SPECS:
            raise CommandRegistrationError(
                f"Command '{name}' already registered"
            )
        _COMMAND_SPECS[name] = {
            "handler": func,
            "help": help_text.strip(),
            "description": (
                description if description is not None else help_text
            ).strip(),
            "arguments": [],
        }
        argument_help = help if help is not None else {}
        for parameter in inspect.signature(func).parameters.values():
            if parameter.kind in [
                inspect.Parameter.VAR_POSITIONAL,
                inspect.Parameter.VAR_KEYWORD,
            ]:
                continue
            flags = []
            kwargs = {}
            if parameter.default is inspect.Parameter.empty:
                flags.append(parameter.name)
            else:
                flags.append("--" + parameter.name.replace("_", "-"))
                kwargs["default"] = parameter.default
                if isinstance(parameter.default, bool):
                    kwargs["action"] = (
                        "store_false" if parameter.default else "store_true"
                    )
                elif parameter.default is not None:
                    kwargs["type"] = type(parameter.default)
            if parameter.name in argument_help:
                kwargs["help"] = argument_help[parameter.name].strip()
            _COMMAND_SPECS[name]["arguments"].append(
                {"flags": flags, "kwargs": kwargs, "dest": parameter.name}
            )
        return func

    return decorator
