from rich.pretty import pprint

from sextant import *


parser = (
    Parser(shell=True, fancy=True)
    .global_flag(FlagRecipe("verbose"))
    .command(CommandRecipe("help"))
    .command(CommandRecipe("version"))
    .command(
        CommandRecipe("serve")
        .positional()
        .flag(FlagRecipe("ip").positional().required())
        .flag(FlagRecipe("port").positional())
    )
)


if __name__ == '__main__':
    pprint(parser.parse())
