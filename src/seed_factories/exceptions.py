"""Custom exceptions with helpful error messages."""


class SeedFactoriesError(Exception):
    """Base exception for seed-factories errors."""

    pass


class FactoryNotRegisteredError(SeedFactoriesError):
    """No factory was registered for the entity type."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(
            f'Factory for "{entity_name}" is not registered.\n\n'
            f"Suggestions:\n"
            f"1. Register it before building:\n"
            f"   define({entity_name}, lambda f: f.build(make_{entity_name.lower()}))\n"
            f"2. Check that the module defining the factory is imported\n"
            f"3. If using the pytest plugin, register inside the test or a fixture "
            f"that depends on 'factory_registry'"
        )


class TraitNotFoundError(SeedFactoriesError):
    """A selected trait has no matching registered trait."""

    def __init__(self, trait_name: str, entity_name: str):
        self.trait_name = trait_name
        self.entity_name = entity_name
        super().__init__(
            f"Trait '{trait_name}' is not defined on factory '{entity_name}'.\n\n"
            f"Suggestions:\n"
            f"1. Check trait name spelling in with_traits(...)\n"
            f"2. Define it: factory.trait('{trait_name}', callback)"
        )


class BuildRecipeMissingError(SeedFactoriesError):
    """Factory was registered without a build recipe."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(
            f"Factory '{entity_name}' has no build recipe.\n\n"
            f"Suggestions:\n"
            f"1. Call factory.build(recipe) inside the definition callback\n"
            f"2. The recipe receives the options dict and returns an unsaved entity"
        )


class FactoryDefinitionError(SeedFactoriesError):
    """Invalid input while defining a factory."""

    def __init__(self, entity_name: str, problem: str):
        self.entity_name = entity_name
        self.problem = problem
        super().__init__(f"Invalid definition for factory '{entity_name}': {problem}")


class AsyncCallbackError(SeedFactoriesError):
    """An awaitable was produced during a synchronous build."""

    def __init__(self, entity_name: str, step: str):
        self.entity_name = entity_name
        self.step = step
        super().__init__(
            f"{step} returned an awaitable while building '{entity_name}' synchronously.\n\n"
            f"Suggestions:\n"
            f"1. Use 'await factory({entity_name}).asave_one()' or asave_many()\n"
            f"2. Or make the callback and persister synchronous"
        )
