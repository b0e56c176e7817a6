from twolevel.components.bits import string_to_bits
from twolevel.predictors.base import BranchInstruction, BranchResult

T = BranchResult.TAKEN
N = BranchResult.NOT_TAKEN


def b(text):
    return string_to_bits(text)


def branch(address):
    return BranchInstruction(address=b(address))


def run(predictor, address, outcomes):
    """Feed outcomes for one address, return the predictions."""
    instruction = branch(address)
    return [predictor.predict_and_update(instruction, actual) for actual in outcomes]
