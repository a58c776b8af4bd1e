from ..aad.core.var import Variable


def norm_loss(prediction: Variable, target) -> Variable:
    """Frobenius distance ||prediction - target|| as a 1x1 Variable."""
    return (prediction - target).norm()
