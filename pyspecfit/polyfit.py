"""
Polynomial least-squares fits.

Thin front end over LinearSystem: builds a Vandermonde matrix from scalar
samples, weights it by the per-sample uncertainty and solves for the
polynomial coefficients (constant term first).
"""

import numpy as np
import pandas as pd
from typing import Union
from scipy import stats

from ._backends import DecompositionMode
from ._utils import check_vector
from .errors import ShapeError
from .linear_system import LinearSystem


def vandermonde(samples, order: int) -> np.ndarray:
    """Matrix whose column k is samples**k, k = 0..order."""
    samples = np.asarray(samples, dtype=np.float64)
    return np.vander(samples, order + 1, increasing=True)


def _prepare(samples, order, b, sigma):
    if order < 0:
        raise ShapeError(f"Polynomial order must be >= 0, got {order}")
    t = check_vector(samples, name='samples')
    b = check_vector(b, name='b', size=t.shape[0])
    if sigma is not None:
        sigma = check_vector(sigma, name='sigma', size=t.shape[0])
    return t, b, sigma


def fit_polynomial(
    samples,
    order: int,
    b,
    sigma=None,
    mode: Union[str, DecompositionMode] = 'qr'
) -> np.ndarray:
    """
    Fit a polynomial of the given order to (samples, b).

    Parameters
    ----------
    samples : array, shape (m,)
        Abscissa values (e.g. wavelengths)
    order : int
        Polynomial order; order + 1 coefficients are fitted
    b : array, shape (m,)
        Values to fit
    sigma : array, shape (m,), optional
        Per-sample uncertainty; residuals are weighted by 1/sigma
    mode : str or DecompositionMode
        Decomposition used for the fit (default 'qr')

    Returns
    -------
    ndarray, shape (order + 1,)
        Coefficients c0..c_order of c0 + c1 t + ... + c_order t**order

    Examples
    --------
    >>> t = np.linspace(0, 1, 20)
    >>> coef = fit_polynomial(t, 2, 3 + 2*t - t**2)   # [3, 2, -1]
    """
    t, b, sigma = _prepare(samples, order, b, sigma)

    with LinearSystem.from_matrix(vandermonde(t, order), mode) as system:
        system.set_weight(sigma)
        system.decompose()
        b_weighted = b / sigma if sigma is not None else b
        return system.solve(b_weighted)


class PolynomialFit:
    """
    Polynomial fit with coefficient uncertainties.

    Examples
    --------
    >>> fit = PolynomialFit(wavelength, order=3, b=offset, sigma=noise)
    >>> fit.coef           # Named coefficients
    >>> fit.std_errors     # One-sigma uncertainties
    >>> fit.conf_int()     # Confidence intervals
    >>> fit.predict(new_wavelength)
    """

    def __init__(
        self,
        samples,
        order: int,
        b,
        sigma=None,
        mode: Union[str, DecompositionMode] = 'qr'
    ):
        t, b, sigma = _prepare(samples, order, b, sigma)

        self.samples = t
        self.b = b
        self.sigma = sigma
        self.order = order
        self.n_obs = t.shape[0]
        self.n_coef = order + 1
        self.var_names = [f'c{k}' for k in range(self.n_coef)]

        A = vandermonde(t, order)
        with LinearSystem.from_matrix(A, mode) as system:
            system.set_weight(sigma)
            self._decomposition = system.decompose(covariance=True)
            b_weighted = b / sigma if sigma is not None else b
            self.coefficients = system.solve(b_weighted)
            self.mode = system.mode.value

        self._compute_statistics(A)

    def _compute_statistics(self, A):
        """Compute residuals, chi-square and scaled covariance."""
        self.fitted_values = A @ self.coefficients
        self.residuals = self.b - self.fitted_values
        self.rank = self._decomposition.rank
        self.df_residual = self.n_obs - self.n_coef

        weighted = self.residuals / self.sigma if self.sigma is not None else self.residuals
        self.chi_square = float(np.sum(weighted**2))

        # With known sigma (A'A)^-1 is already the covariance; otherwise scale
        # by the residual variance
        cov = self._decomposition.covariance
        if self.sigma is None:
            scale = self.chi_square / self.df_residual if self.df_residual > 0 else np.nan
            cov = cov * scale
        self.covariance = cov
        self.std_errors = np.sqrt(np.diag(cov))

    @property
    def coef(self):
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.var_names)

    @property
    def vcov(self):
        """Named covariance matrix (pandas DataFrame)."""
        return pd.DataFrame(self.covariance, index=self.var_names, columns=self.var_names)

    def conf_int(self, alpha: float = 0.05):
        """
        Confidence intervals for coefficients.

        Parameters
        ----------
        alpha : float
            Significance level (default: 0.05 for 95% CI)

        Returns
        -------
        DataFrame
            Confidence intervals with columns 'lower' and 'upper'
        """
        if self.df_residual > 0:
            t_crit = stats.t.ppf(1 - alpha/2, self.df_residual)
        else:
            t_crit = np.nan
        lower = self.coefficients - t_crit * self.std_errors
        upper = self.coefficients + t_crit * self.std_errors

        return pd.DataFrame({
            'lower': lower,
            'upper': upper
        }, index=self.var_names)

    def predict(self, samples) -> np.ndarray:
        """Evaluate the fitted polynomial at new sample positions."""
        return vandermonde(np.atleast_1d(samples), self.order) @ self.coefficients

    def summary(self):
        """Print summary of fit results."""
        print()
        print("="*60)
        print("POLYNOMIAL FIT RESULTS")
        print("="*60)
        print()
        print(f"Order: {self.order}")
        print(f"Number of observations: {self.n_obs}")
        print(f"Degrees of freedom: {self.df_residual} (residual)")
        print(f"Weighted: {'yes' if self.sigma is not None else 'no'}")
        print()
        print("Coefficients:")
        print("-"*60)
        print(f"{'Term':<10} {'Estimate':>16} {'Std. Error':>16}")
        print("-"*60)
        for i, name in enumerate(self.var_names):
            print(f"{name:<10} {self.coefficients[i]:>16.6e} {self.std_errors[i]:>16.6e}")
        print("-"*60)
        print()
        print(f"Chi-square: {self.chi_square:.6e}")
        print(f"Decomposition: {self.mode}")
        print("="*60)
        print()

    def __repr__(self):
        return f"PolynomialFit(order={self.order}, n={self.n_obs}, chi2={self.chi_square:.3g})"


def polyfit(samples, order: int, b, sigma=None, **kwargs) -> PolynomialFit:
    """
    Fit a polynomial and keep its statistics (convenience function).

    Returns
    -------
    PolynomialFit
        Fitted polynomial object
    """
    return PolynomialFit(samples, order, b, sigma=sigma, **kwargs)
