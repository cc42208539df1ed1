from aiogram.fsm.state import State, StatesGroup


class UserMode(StatesGroup):
    main_menu = State()


class RecipeForm(StatesGroup):
    ingredients = State()
    meal_type = State()
    duration = State()
    people_count = State()
    generating = State()
    browsing = State()
