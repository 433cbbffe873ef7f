import pytest

from exactgeodesic import config


def test_convergence_policy():
    assert config.get_convergence_policy() == 'ignore'

    config.set_convergence_policy('raise')
    assert config.get_convergence_policy() == 'raise'

    config.set_convergence_policy('warn')
    assert config.get_convergence_policy() == 'warn'

    with pytest.raises(ValueError, match="Unknown policy 'loud'"):
        config.set_convergence_policy('loud')

    # A rejected value leaves the setting alone
    assert config.get_convergence_policy() == 'warn'

    config.set_convergence_policy('ignore')
