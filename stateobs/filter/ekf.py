"""
Extended Kalman Filter (EKF) implementation.

Provides the one-step estimation (prediction and correction) used by a
zero-delay observer over a nonlinear dynamics functor.
"""
import logging
import numpy as np
from typing import Optional, Tuple

from ..observer.base import EstimationStep

logger = logging.getLogger(__name__)


class ExtendedKalmanFilter:
    """
    Extended Kalman Filter for nonlinear state estimation.

    The system is modeled as:
        x[k+1] = f(x[k], u[k], k) + w[k]
        y[k]   = h(x[k], k) + v[k]

    where f and h are given by a functor providing ``state_dynamics`` and
    ``measure_dynamics``. Jacobians are computed by finite differences unless
    set explicitly.
    """

    def __init__(self,
                 functor,
                 process_covariance: Optional[np.ndarray] = None,
                 measurement_covariance: Optional[np.ndarray] = None,
                 initial_covariance: Optional[np.ndarray] = None,
                 fd_step: float = 1e-8):
        """
        Initialize EKF.

        Args:
            functor: Dynamics functor (state_dynamics, measure_dynamics, sizes)
            process_covariance: Process noise covariance Q (default: identity)
            measurement_covariance: Measurement noise covariance R (default: identity)
            initial_covariance: Initial state covariance (default: identity)
            fd_step: Step of the finite-difference Jacobians
        """
        self.functor = functor
        self.state_dim = functor.state_size
        self.measurement_dim = functor.measurement_size

        self.Q = np.eye(self.state_dim) if process_covariance is None else np.array(process_covariance, dtype=np.float64)
        self.R = np.eye(self.measurement_dim) if measurement_covariance is None else np.array(measurement_covariance, dtype=np.float64)

        if initial_covariance is None:
            self.P = np.eye(self.state_dim)
        else:
            self.P = np.array(initial_covariance, dtype=np.float64)

        self.fd_step = fd_step
        self.A: Optional[np.ndarray] = None
        self.C: Optional[np.ndarray] = None
        self.last_innovation: Optional[np.ndarray] = None

        # Small value for numerical stability
        self.epsilon = 1e-10

    def one_step_estimation(self, step: EstimationStep) -> np.ndarray:
        """
        Estimate x_k+1 from x_k, u_k and y_k+1.

        Args:
            step: Estimation step data

        Returns:
            Corrected state estimate at time k+1
        """
        k = step.time
        x, u = step.state, step.input

        # Prediction
        A = self.A if self.A is not None else self.get_a_matrix_fd(x, u, k)
        x_pred = self.functor.state_dynamics(x, u, k)
        self.predict(A, self.Q)

        # Correction
        C = self.C if self.C is not None else self.get_c_matrix_fd(x_pred, k + 1)
        residual = step.measurement - self.functor.measure_dynamics(x_pred, k + 1)
        state_correction, _ = self.update(C, self.R, residual)
        self.last_innovation = residual

        logger.debug("EKF step %d -> %d, innovation norm %.3e", k, k + 1, np.linalg.norm(residual))
        return x_pred + state_correction

    def predict(self, F: np.ndarray, Q: np.ndarray):
        """
        EKF prediction step.

        P_k+1 = F * P_k * F^T + Q

        Args:
            F: State transition matrix
            Q: Process noise covariance
        """
        self.P = F @ self.P @ F.T + Q

        # Ensure symmetry
        self.P = 0.5 * (self.P + self.P.T)

        # Ensure positive definiteness
        self._ensure_positive_definite()

    def update(self,
               H: np.ndarray,
               R: np.ndarray,
               residual: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        EKF update step.

        Args:
            H: Measurement Jacobian
            R: Measurement noise covariance
            residual: Innovation (measurement residual)

        Returns:
            (state_correction, updated_covariance)
        """
        # Innovation covariance: S = H * P * H^T + R
        S = H @ self.P @ H.T + R

        # Ensure symmetry
        S = 0.5 * (S + S.T)

        # Kalman gain: K = P * H^T * S^-1
        try:
            K = self.P @ H.T @ np.linalg.inv(S)
        except np.linalg.LinAlgError:
            logger.warning("Singular innovation covariance, using pseudo-inverse")
            K = self.P @ H.T @ np.linalg.pinv(S)

        # State correction: dx = K * residual
        state_correction = K @ residual

        # Covariance update: P = (I - K*H) * P * (I - K*H)^T + K*R*K^T (Joseph form)
        I_KH = np.eye(self.state_dim) - K @ H
        self.P = I_KH @ self.P @ I_KH.T + K @ R @ K.T

        # Ensure symmetry
        self.P = 0.5 * (self.P + self.P.T)

        # Ensure positive definiteness
        self._ensure_positive_definite()

        return state_correction, self.P

    def get_a_matrix_fd(self, x: np.ndarray, u: Optional[np.ndarray], k: int) -> np.ndarray:
        """Forward finite-difference Jacobian of the state dynamics."""
        f0 = self.functor.state_dynamics(x, u, k)
        A = np.zeros((self.state_dim, self.state_dim))
        for i in range(self.state_dim):
            dx = np.zeros(self.state_dim)
            dx[i] = self.fd_step
            A[:, i] = (self.functor.state_dynamics(x + dx, u, k) - f0) / self.fd_step
        return A

    def get_c_matrix_fd(self, x: np.ndarray, k: int) -> np.ndarray:
        """Forward finite-difference Jacobian of the measurement function."""
        h0 = self.functor.measure_dynamics(x, k)
        C = np.zeros((self.measurement_dim, self.state_dim))
        for i in range(self.state_dim):
            dx = np.zeros(self.state_dim)
            dx[i] = self.fd_step
            C[:, i] = (self.functor.measure_dynamics(x + dx, k) - h0) / self.fd_step
        return C

    def set_a_matrix(self, A: Optional[np.ndarray]):
        """Set a constant state Jacobian; None reverts to finite differences."""
        self.A = None if A is None else np.asarray(A, dtype=np.float64)

    def set_c_matrix(self, C: Optional[np.ndarray]):
        """Set a constant measurement Jacobian; None reverts to finite differences."""
        self.C = None if C is None else np.asarray(C, dtype=np.float64)

    def set_q(self, Q: np.ndarray):
        self.Q = np.array(Q, dtype=np.float64)

    def set_r(self, R: np.ndarray):
        self.R = np.array(R, dtype=np.float64)

    def get_covariance(self) -> np.ndarray:
        """Get current state covariance."""
        return self.P.copy()

    def set_covariance(self, P: np.ndarray):
        """Set state covariance."""
        self.P = np.array(P, dtype=np.float64)

    def save(self):
        """Snapshot of the internal state, restored if an estimation fails."""
        innovation = None if self.last_innovation is None else self.last_innovation.copy()
        return self.P.copy(), innovation

    def restore(self, snapshot):
        self.P, self.last_innovation = snapshot

    def _ensure_positive_definite(self):
        """Ensure covariance matrix is positive definite."""
        # Add small diagonal term if needed
        min_eigenvalue = np.min(np.linalg.eigvalsh(self.P))

        if min_eigenvalue < self.epsilon:
            self.P += (self.epsilon - min_eigenvalue) * np.eye(self.state_dim)
