"""Custom function -- teach the extractor a new accessor.

``scoped "service" "port"`` reads the key ``service/port``. A plain
extraction rule can only report one literal argument, so the definition
supplies its own extraction hooks that join the two literals into the key
actually read.

Run:
    python app.py
"""

from tmpldeps import BuildVariant, Environment, FunctionDefinition, VariableInfo
from tmpldeps.nodes import String


def render_scoped(values):
    def scoped(scope: str, key: str) -> str:
        return values.get(f"{scope}/{key}", "")

    return scoped


def scoped_infos(args, depth, walker) -> list[VariableInfo]:
    operands = args[1:3]
    if len(operands) == 2 and all(isinstance(arg, String) for arg in operands):
        return [VariableInfo(f"{operands[0].value}/{operands[1].value}")]
    # Computed scope or key: report the inputs it is computed from
    infos: list[VariableInfo] = []
    for arg in operands:
        infos.extend(walker.walk_with_defaults(arg, depth))
    return infos


def scoped_names(args, depth, walker) -> list[str]:
    return [info.name for info in scoped_infos(args, depth, walker)]


SCOPED = FunctionDefinition(
    name="scoped",
    description="Read scope/key from the value store",
    render=render_scoped,
    extractor=scoped_names,
    extractor_with_defaults=scoped_infos,
)

SOURCE = 'listen {{scoped "web" "host"}}:{{scoped "web" "port"}} as {{scoped .role "user"}}'

env = Environment(variant=BuildVariant.UTILITY)
env.register_function(SCOPED)

names = env.extract_names(SOURCE)
infos = env.extract_with_defaults(SOURCE)
output = env.render(
    SOURCE, {"web/host": "0.0.0.0", "web/port": "80", "role": "worker", "worker/user": "www"}
)


def main() -> None:
    print("Reads:", names)
    print(output)


if __name__ == "__main__":
    main()
