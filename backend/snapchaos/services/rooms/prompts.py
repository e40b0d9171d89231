import random
from typing import Optional, Sequence

PROMPTS = (
    'Something that looks like a face',
    'The most chaotic corner of the room',
    'Your best surprised expression',
    'Something older than you',
    'A shadow that looks like an animal',
    'The weirdest thing in your bag',
    'Something that should not be in the fridge',
    'Your pet (or the closest thing to one)',
    'A sign with a typo',
    'Something perfectly symmetrical',
    'The view out the nearest window',
    'A shoe doing something unusual',
    'Something that is the colour purple',
    'Your most dramatic pose',
    'A snack arranged as art',
)


def pick_prompt(rng: Optional[random.Random] = None, prompts: Sequence[str] = PROMPTS) -> str:
    return (rng or random).choice(prompts)
