from storefront.domain.core.enums import PaymentMethod

PAYMENT_LABELS = {
    PaymentMethod.pix: "PIX",
    PaymentMethod.dinheiro: "Dinheiro",
    PaymentMethod.cartao: "Cartão",
}


def payment_method_label(method: PaymentMethod | str | None) -> str:
    if method is None:
        return ""
    if not isinstance(method, PaymentMethod):
        try:
            method = PaymentMethod(str(method))
        except ValueError:
            return str(method)
    return PAYMENT_LABELS[method]
