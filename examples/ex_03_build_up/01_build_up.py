"""Member injection (build-up) for customized types.

Customized instances get their ``Injected[...]`` attributes populated only
when build-up is enabled: through the customizer default, or per type with
``build_up()``. A per-type override always wins over the default.
"""

from __future__ import annotations

from plugwire import Container, Customizer, Injected


class Clock:
    def now(self) -> str:
        return "12:00"


class Audited:
    audited_by: str


class Report:
    clock: Injected[Clock]


class Invoice:
    clock: Injected[Clock]


def main() -> None:
    container = Container()
    customizer = Customizer().set_default_build_up(True)
    customizer.install(container)

    customizer.setup(Report).extend_with(Audited)
    customizer.setup(Invoice).extend_with(Audited).build_up(False)

    report = container.resolve(Report)
    print(f"report_clock={report.clock.now()}")  # => report_clock=12:00

    invoice = container.resolve(Invoice)
    has_clock = getattr(invoice, "clock", None) is not None
    print(f"invoice_has_clock={has_clock}")  # => invoice_has_clock=False

    container.build_up(invoice)
    print(f"invoice_clock_after_build_up={invoice.clock.now()}")  # => invoice_clock_after_build_up=12:00


if __name__ == "__main__":
    main()
